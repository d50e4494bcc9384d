"""
Customer API endpoints (marketplace admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from kamioun.api.serializers import customer_detail
from kamioun.core.database import get_db
from kamioun.core.storage import StorageService, get_storage, read_upload
from kamioun.repositories import CustomerRepository
from kamioun.services.customer_service import CustomerService

router = APIRouter(prefix="/api/marketplace/customers", tags=["Customers"])


@router.get("")
def list_customers(db: Session = Depends(get_db)):
    """All customers with favorites, orders, reservations and notifications"""
    customers = CustomerRepository(db).find_all()
    relations = ("favorite_products", "favorite_partners", "orders", "reservations", "notifications")
    return {
        "message": "Customers retrieved successfully" if customers else "No customers found",
        "data": [customer_detail(c, relations) for c in customers],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    telephone: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    governorate: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    fiscal_id: Optional[str] = Form(None),
    business_type: Optional[str] = Form(None),
    activity1: Optional[str] = Form(None),
    activity2: Optional[str] = Form(None),
    social_name: Optional[str] = Form(None),
    type_patente: Optional[str] = Form(None),
    m_role_id: Optional[str] = Form(None),
    cin_photo: Optional[UploadFile] = File(None),
    patent_photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Register a customer (multipart form)

    cin_photo and patent_photo are required and stored in the
    customer-documents bucket. The phone number is stored in E.164.
    """
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "telephone": telephone,
        "password": password,
        "governorate": governorate,
        "address": address,
        "fiscal_id": fiscal_id,
        "business_type": business_type,
        "activity1": activity1,
        "activity2": activity2,
        "social_name": social_name,
        "type_patente": type_patente,
        "m_role_id": m_role_id,
    }
    customer = CustomerService(db, storage).register(
        fields,
        cin_photo=await read_upload(cin_photo),
        patent_photo=await read_upload(patent_photo),
    )
    return {
        "success": True,
        "message": "Account created successfully",
        "customer": customer.to_public_dict(),
    }


@router.get("/{customer_id}")
def get_customer(customer_id: str, db: Session = Depends(get_db)):
    customer = CustomerRepository(db).find_by_id(customer_id, with_relations=True)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer_detail(customer)


@router.patch("/{customer_id}")
async def update_customer(
    customer_id: str,
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    telephone: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    governorate: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    fiscal_id: Optional[str] = Form(None),
    business_type: Optional[str] = Form(None),
    activity1: Optional[str] = Form(None),
    activity2: Optional[str] = Form(None),
    social_name: Optional[str] = Form(None),
    type_patente: Optional[str] = Form(None),
    m_role_id: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    cin_photo: Optional[UploadFile] = File(None),
    patent_photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "telephone": telephone,
        "password": password,
        "governorate": governorate,
        "address": address,
        "fiscal_id": fiscal_id,
        "business_type": business_type,
        "activity1": activity1,
        "activity2": activity2,
        "social_name": social_name,
        "type_patente": type_patente,
        "m_role_id": m_role_id,
        "is_active": is_active,
    }
    customer = CustomerService(db, storage).update(
        customer_id,
        fields,
        cin_photo=await read_upload(cin_photo),
        patent_photo=await read_upload(patent_photo),
    )
    return {"message": "Customer updated successfully", "customer": customer.to_public_dict()}


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    deleted = CustomerService(db, storage).delete(customer_id)
    return {"message": "Customer deleted successfully", "customer": deleted}
