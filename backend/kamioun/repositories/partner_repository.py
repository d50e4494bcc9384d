"""
Partner Repository - Data Access Layer for partners, sources, SKU offers and stock

Author: Kamioun
Date: 2025-03-02
"""
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload, joinedload

from kamioun.models import (
    FavoritePartner,
    Partner,
    PartnerSettings,
    SkuPartner,
    Source,
    Stock,
)


class PartnerRepository:
    """
    Repository for Partner data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[Partner]:
        """All partners with favorites, type and SKU offers"""
        return (
            self.db.query(Partner)
            .options(
                selectinload(Partner.favorite_partners),
                joinedload(Partner.type_partner),
                selectinload(Partner.sku_partners),
            )
            .order_by(Partner.username)
            .all()
        )

    def find_by_id(self, partner_id: str, with_relations: bool = False) -> Optional[Partner]:
        query = self.db.query(Partner)
        if with_relations:
            query = query.options(
                selectinload(Partner.favorite_partners).joinedload(FavoritePartner.customer),
                joinedload(Partner.type_partner),
                selectinload(Partner.sku_partners).joinedload(SkuPartner.product),
            )
        return query.filter(Partner.id == partner_id).first()

    def find_conflict(self, username: Optional[str], email: Optional[str], exclude_id: str) -> Optional[Partner]:
        """Another partner already using this username or email"""
        conditions = []
        if username:
            conditions.append(Partner.username == username)
        if email:
            conditions.append(Partner.email == email)
        if not conditions:
            return None
        return (
            self.db.query(Partner)
            .filter(or_(*conditions), Partner.id != exclude_id)
            .first()
        )

    def find_settings(self, partner_id: str) -> List[PartnerSettings]:
        return (
            self.db.query(PartnerSettings)
            .options(selectinload(PartnerSettings.schedules))
            .filter(PartnerSettings.partner_id == partner_id)
            .all()
        )

    def delete(self, partner: Partner) -> None:
        self.db.delete(partner)
        self.db.flush()


class SkuPartnerRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_for_product(self, product_id: str) -> List[SkuPartner]:
        """Offers of a product, with partner and stock per source"""
        return (
            self.db.query(SkuPartner)
            .options(
                joinedload(SkuPartner.partner),
                selectinload(SkuPartner.stock).joinedload(Stock.source),
            )
            .filter(SkuPartner.product_id == product_id)
            .all()
        )

    def find_by_product_and_partner(self, product_id: str, partner_id: str) -> Optional[SkuPartner]:
        return (
            self.db.query(SkuPartner)
            .filter(SkuPartner.product_id == product_id, SkuPartner.partner_id == partner_id)
            .first()
        )


class StockRepository:
    """
    Repository for Stock rows (one per SKU offer and source)
    """

    def __init__(self, db: Session):
        self.db = db

    def find_for_offer(self, product_id: str, partner_id: str, source_id: Optional[str]) -> Optional[Stock]:
        """
        Stock of the partner's offer for a product in a source

        Args:
            product_id: Product UUID
            partner_id: Selling partner UUID
            source_id: Source (warehouse) UUID

        Returns:
            Stock or None if the partner holds no stock there
        """
        return (
            self.db.query(Stock)
            .join(SkuPartner, Stock.sku_partner_id == SkuPartner.id)
            .filter(
                SkuPartner.product_id == product_id,
                SkuPartner.partner_id == partner_id,
                Stock.source_id == source_id,
            )
            .first()
        )

    def find_for_sku(self, sku: Optional[str], product_id: str, source_id: str) -> Optional[Stock]:
        """Stock matched by partner SKU code, product and source"""
        query = (
            self.db.query(Stock)
            .join(SkuPartner, Stock.sku_partner_id == SkuPartner.id)
            .filter(SkuPartner.product_id == product_id, Stock.source_id == source_id)
        )
        if sku is not None:
            query = query.filter(SkuPartner.sku_product == sku)
        return query.first()

    def find_by_sku_partner_and_source(self, sku_partner_id: str, source_id: str) -> Optional[Stock]:
        return (
            self.db.query(Stock)
            .filter(Stock.sku_partner_id == sku_partner_id, Stock.source_id == source_id)
            .first()
        )

    def find_all(self, sku_partner_id: Optional[str] = None, source_id: Optional[str] = None) -> List[Stock]:
        query = self.db.query(Stock).options(
            joinedload(Stock.sku_partner).joinedload(SkuPartner.product),
            joinedload(Stock.sku_partner).joinedload(SkuPartner.partner),
            joinedload(Stock.source),
        )
        if sku_partner_id:
            query = query.filter(Stock.sku_partner_id == sku_partner_id)
        if source_id:
            query = query.filter(Stock.source_id == source_id)
        return query.all()


class SourceRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[Source]:
        return (
            self.db.query(Source)
            .options(joinedload(Source.partner), selectinload(Source.stock))
            .order_by(Source.name)
            .all()
        )

    def find_by_id(self, source_id: str) -> Optional[Source]:
        return self.db.query(Source).filter(Source.id == source_id).first()
