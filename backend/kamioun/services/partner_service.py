"""
Partner Service
Admin updates of selling partners, including logo and patent documents
"""
import logging
from typing import Dict, Optional

from fastapi import status
from sqlalchemy.orm import Session

from kamioun.core.auth import hash_password
from kamioun.core.errors import BusinessError, ConflictError, NotFoundError
from kamioun.core.storage import MARKETPLACE_BUCKET, FileUpload, StorageError, StorageService
from kamioun.models import Partner
from kamioun.repositories import PartnerRepository

logger = logging.getLogger(__name__)

LOGO_TYPES = {"image/jpeg", "image/png", "image/webp"}
PATENT_TYPES = {"application/pdf"}

# Empty form values keep the stored value
TEXT_FIELDS = (
    "username",
    "first_name",
    "last_name",
    "email",
    "telephone",
    "address",
    "responsible_name",
    "position",
    "coverage_area",
    "type_partner_id",
    "m_role_id",
)


class PartnerService:
    def __init__(self, db: Session, storage: StorageService):
        self.db = db
        self.storage = storage
        self.partners = PartnerRepository(db)

    def _replace_file(self, current: Optional[str], upload: Optional[FileUpload], remove: bool,
                      folder: str, prefix: str) -> Optional[str]:
        if remove or upload is not None:
            self.storage.remove_url(MARKETPLACE_BUCKET, current)
            current = None
        if upload is not None:
            try:
                current = self.storage.upload_file(MARKETPLACE_BUCKET, folder, upload, prefix=prefix)
            except StorageError as e:
                raise BusinessError("FILE_UPLOAD_FAILED", f"File upload failed: {e}", status.HTTP_502_BAD_GATEWAY)
        return current

    def update(self, partner_id: str, fields: Dict, logo: Optional[FileUpload] = None,
               patent: Optional[FileUpload] = None) -> Partner:
        """
        Update a partner from admin form data

        Args:
            partner_id: Partner UUID
            fields: Form values; also minimum_amount, is_active, password,
                remove_logo and remove_patent ("true" to clear the file)
            logo: New logo (jpeg, png or webp)
            patent: New patent document (pdf)

        Raises:
            NotFoundError: unknown partner
            ConflictError: username or email used by another partner
            BusinessError: invalid minimum_amount or file type
        """
        partner = self.partners.find_by_id(partner_id)
        if partner is None:
            raise NotFoundError("PARTNER_NOT_FOUND", "Partner not found")

        if logo is not None and not logo.has_type(LOGO_TYPES):
            raise BusinessError("INVALID_FILE_TYPE", "Invalid logo image format")
        if patent is not None and not patent.has_type(PATENT_TYPES):
            raise BusinessError("INVALID_FILE_TYPE", "Invalid patent file format")

        values = {field: fields.get(field) or getattr(partner, field) for field in TEXT_FIELDS}

        if values["username"] != partner.username and self.partners.find_conflict(
                values["username"], None, exclude_id=partner.id):
            raise ConflictError("USERNAME_EXISTS", "Username already exists")
        if values["email"] != partner.email and self.partners.find_conflict(
                None, values["email"], exclude_id=partner.id):
            raise ConflictError("EMAIL_EXISTS", "Email already exists")

        minimum_amount = partner.minimum_amount
        if fields.get("minimum_amount"):
            try:
                minimum_amount = float(fields["minimum_amount"])
            except ValueError:
                raise BusinessError("INVALID_MINIMUM_AMOUNT", "minimum_amount must be a number")

        partner.logo = self._replace_file(
            partner.logo, logo, fields.get("remove_logo") == "true", "partners/logos", "logo")
        partner.patent = self._replace_file(
            partner.patent, patent, fields.get("remove_patent") == "true", "partners/patents", "patent")

        try:
            for field, value in values.items():
                setattr(partner, field, value)
            partner.minimum_amount = minimum_amount
            if fields.get("is_active") is not None:
                partner.is_active = fields["is_active"] == "true"
            if fields.get("password"):
                partner.password = hash_password(fields["password"])
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(partner)
        logger.info(f"Partner {partner.id} updated")
        return partner

    def delete(self, partner_id: str) -> None:
        partner = self.partners.find_by_id(partner_id)
        if partner is None:
            raise NotFoundError("PARTNER_NOT_FOUND", "Partner not found")

        try:
            self.partners.delete(partner)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
