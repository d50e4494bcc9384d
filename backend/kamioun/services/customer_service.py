"""
Customer Service
Customer registration and profile updates, including identity documents
kept in storage

Author: Kamioun
Date: 2025-03-02
"""
import logging
from typing import Dict, Optional

from fastapi import status
from sqlalchemy.orm import Session

from kamioun.core.auth import hash_password
from kamioun.core.errors import BusinessError, ConflictError, NotFoundError
from kamioun.core.phone import normalize_phone
from kamioun.core.storage import (
    CUSTOMER_DOCUMENTS_BUCKET,
    DOCUMENT_TYPES,
    FileUpload,
    StorageError,
    StorageService,
)
from kamioun.models import Customer, TypePatente
from kamioun.repositories import CustomerRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "telephone",
    "password",
    "governorate",
    "address",
    "fiscal_id",
    "business_type",
    "activity1",
)

OPTIONAL_FIELDS = ("activity2", "social_name", "m_role_id")

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "address",
    "governorate",
    "social_name",
    "fiscal_id",
    "business_type",
    "activity1",
    "activity2",
    "m_role_id",
)


def _type_patente(value: Optional[str]) -> Optional[TypePatente]:
    if not value:
        return None
    try:
        return TypePatente(value.upper())
    except ValueError:
        raise BusinessError("INVALID_TYPE_PATENTE", f"type_patente must be one of {[t.value for t in TypePatente]}")


class CustomerService:
    """
    Service for customer accounts

    Handles:
    - Registration with CIN and patent documents
    - Profile updates with document replacement
    - Deletion (documents removed from storage first)
    """

    def __init__(self, db: Session, storage: StorageService):
        self.db = db
        self.storage = storage
        self.customers = CustomerRepository(db)

    def _upload(self, upload: FileUpload, folder: str, prefix: Optional[str] = None) -> str:
        if not upload.has_type(DOCUMENT_TYPES):
            raise BusinessError("INVALID_FILE_TYPE", f"Invalid file type: {upload.content_type}")
        try:
            return self.storage.upload_file(CUSTOMER_DOCUMENTS_BUCKET, folder, upload, prefix=prefix)
        except StorageError as e:
            raise BusinessError("FILE_UPLOAD_FAILED", f"File upload failed: {e}", status.HTTP_502_BAD_GATEWAY)

    def register(self, fields: Dict, cin_photo: Optional[FileUpload], patent_photo: Optional[FileUpload]) -> Customer:
        """
        Create a customer account

        Args:
            fields: Form fields (see REQUIRED_FIELDS / OPTIONAL_FIELDS)
            cin_photo: National ID card scan
            patent_photo: Business patent scan

        Returns:
            Created customer

        Raises:
            BusinessError: missing document or field, invalid phone (400)
            ConflictError: email or phone already registered (409)
        """
        if cin_photo is None:
            raise BusinessError("CIN_PHOTO_REQUIRED", "cin_photo is required")
        if patent_photo is None:
            raise BusinessError("PATENT_PHOTO_REQUIRED", "patent_photo is required")

        for field in REQUIRED_FIELDS:
            if not fields.get(field):
                raise BusinessError("FIELD_REQUIRED", f"{field} is required")

        telephone = normalize_phone(fields["telephone"])
        if telephone is None:
            raise BusinessError("INVALID_PHONE", "Invalid Tunisian phone number")

        if self.customers.find_by_email(fields["email"]):
            raise ConflictError("EMAIL_EXISTS", "This email already exists")
        if self.customers.find_by_telephone(telephone):
            raise ConflictError("PHONE_EXISTS", "This phone number already exists")

        type_patente = _type_patente(fields.get("type_patente"))

        cin_url = self._upload(cin_photo, "cin-photos")
        patent_url = self._upload(patent_photo, "patent-photos")

        customer = Customer(
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            email=fields["email"],
            telephone=telephone,
            password=hash_password(fields["password"]),
            governorate=fields["governorate"],
            address=fields["address"],
            fiscal_id=fields["fiscal_id"],
            business_type=fields["business_type"],
            activity1=fields["activity1"],
            cin_photo=cin_url,
            patent_photo=patent_url,
            type_patente=type_patente,
            is_active=True,
            **{field: fields.get(field) or None for field in OPTIONAL_FIELDS},
        )

        try:
            self.customers.add(customer)
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.storage.remove_url(CUSTOMER_DOCUMENTS_BUCKET, cin_url)
            self.storage.remove_url(CUSTOMER_DOCUMENTS_BUCKET, patent_url)
            raise

        logger.info(f"Customer {customer.id} registered")
        return customer

    def update(self, customer_id: str, fields: Dict, cin_photo: Optional[FileUpload] = None,
               patent_photo: Optional[FileUpload] = None) -> Customer:
        """
        Update a customer profile

        Empty form values leave the stored value unchanged. A new document
        replaces the stored one: the old file is removed once the change is
        committed, and new uploads are removed again if it is not.
        """
        customer = self.customers.find_by_id(customer_id)
        if customer is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", "Customer not found")

        email = fields.get("email")
        if email and email != customer.email and self.customers.find_conflict(email=email, exclude_id=customer.id):
            raise ConflictError("EMAIL_EXISTS", "Email already exists")

        telephone = None
        if fields.get("telephone"):
            telephone = normalize_phone(fields["telephone"])
            if telephone is None:
                raise BusinessError("INVALID_PHONE", "Invalid Tunisian phone number")
            if self.customers.find_conflict(telephone=telephone, exclude_id=customer.id):
                raise ConflictError("PHONE_EXISTS", "Phone number already exists")

        for upload in (cin_photo, patent_photo):
            if upload is not None and not upload.has_type(DOCUMENT_TYPES):
                raise BusinessError("INVALID_FILE_TYPE", f"Invalid file type: {upload.content_type}")

        uploaded, replaced = [], []
        try:
            for attribute, upload in (("cin_photo", cin_photo), ("patent_photo", patent_photo)):
                if upload is None:
                    continue
                url = self._upload(upload, f"customers/{customer.id}", prefix=attribute.split("_")[0])
                uploaded.append(url)
                replaced.append(getattr(customer, attribute))
                setattr(customer, attribute, url)

            for field in PROFILE_FIELDS:
                if fields.get(field):
                    setattr(customer, field, fields[field])
            if telephone:
                customer.telephone = telephone
            if fields.get("type_patente"):
                customer.type_patente = _type_patente(fields["type_patente"])
            if fields.get("password"):
                customer.password = hash_password(fields["password"])
            if fields.get("is_active") is not None:
                customer.is_active = str(fields["is_active"]).lower() == "true"
            self.db.commit()
        except Exception:
            self.db.rollback()
            for url in uploaded:
                self.storage.remove_url(CUSTOMER_DOCUMENTS_BUCKET, url)
            raise

        for url in replaced:
            self.storage.remove_url(CUSTOMER_DOCUMENTS_BUCKET, url)
        self.db.refresh(customer)
        return customer

    def delete(self, customer_id: str) -> Dict:
        customer = self.customers.find_by_id(customer_id)
        if customer is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", "Customer not found")

        self.storage.remove_url(CUSTOMER_DOCUMENTS_BUCKET, customer.cin_photo)
        self.storage.remove_url(CUSTOMER_DOCUMENTS_BUCKET, customer.patent_photo)

        snapshot = customer.to_public_dict()
        try:
            self.customers.delete(customer)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return snapshot
