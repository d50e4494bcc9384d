"""
Partner API endpoints (marketplace sellers)
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from kamioun.api.serializers import customer_public
from kamioun.core.database import get_db
from kamioun.core.storage import StorageService, get_storage, read_upload
from kamioun.models import Partner
from kamioun.repositories import PartnerRepository
from kamioun.services.partner_service import PartnerService

router = APIRouter(prefix="/api/marketplace", tags=["Partners"])


def _partner_detail(partner: Partner) -> dict:
    data = partner.to_public_dict()
    data["type_partner"] = partner.type_partner.to_dict() if partner.type_partner else None
    data["favorite_partners"] = [
        {**fav.to_dict(), "customer": customer_public(fav.customer)} for fav in partner.favorite_partners
    ]
    data["sku_partners"] = [sp.to_dict() for sp in partner.sku_partners]
    return data


@router.get("/partners")
def list_partners(db: Session = Depends(get_db)):
    partners = PartnerRepository(db).find_all()
    return {
        "success": True,
        "data": [_partner_detail(p) for p in partners],
        "meta": {"count": len(partners)},
    }


@router.get("/partners/{partner_id}")
def get_partner(partner_id: str, db: Session = Depends(get_db)):
    partner = PartnerRepository(db).find_by_id(partner_id, with_relations=True)
    if not partner:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Partner not found")
    return {"message": "Partner retrieved successfully", "partner": _partner_detail(partner)}


@router.patch("/partners/{partner_id}")
async def update_partner(
    partner_id: str,
    username: Optional[str] = Form(None),
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    telephone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    responsible_name: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    coverage_area: Optional[str] = Form(None),
    type_partner_id: Optional[str] = Form(None),
    m_role_id: Optional[str] = Form(None),
    minimum_amount: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    remove_logo: Optional[str] = Form(None),
    remove_patent: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    patent: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Update a partner (multipart form)

    Missing fields keep their current value. logo accepts jpeg/png/webp,
    patent accepts pdf; remove_logo / remove_patent = "true" clear them.
    """
    fields = {
        "username": username,
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "telephone": telephone,
        "address": address,
        "responsible_name": responsible_name,
        "position": position,
        "coverage_area": coverage_area,
        "type_partner_id": type_partner_id,
        "m_role_id": m_role_id,
        "minimum_amount": minimum_amount,
        "is_active": is_active,
        "password": password,
        "remove_logo": remove_logo,
        "remove_patent": remove_patent,
    }
    partner = PartnerService(db, storage).update(
        partner_id,
        fields,
        logo=await read_upload(logo),
        patent=await read_upload(patent),
    )
    return {"message": "Partner updated successfully", "partner": partner.to_public_dict()}


@router.delete("/partners/{partner_id}")
def delete_partner(
    partner_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    PartnerService(db, storage).delete(partner_id)
    return {"message": "Partner deleted successfully"}


@router.get("/settings/{partner_id}")
def get_partner_settings(partner_id: str, db: Session = Depends(get_db)):
    """Delivery settings of a partner with their weekly schedules"""
    settings = PartnerRepository(db).find_settings(partner_id)
    if not settings:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No settings found for this partner")
    return {
        "success": True,
        "data": [
            {**s.to_dict(), "schedules": [sch.to_dict() for sch in s.schedules]}
            for s in settings
        ],
    }
