"""
Repository Layer - Data Access

This layer holds all ORM queries. Repositories wrap a SQLAlchemy session;
committing is left to the caller so a service can group several
repository calls into one unit of work.

Author: Kamioun
Date: 2025-03-02
"""
from kamioun.repositories.customer_repository import CustomerRepository, PasswordResetTokenRepository
from kamioun.repositories.catalog_repository import (
    BrandRepository,
    ProductRepository,
    ProductSubCategoryRepository,
    RelatedProductRepository,
    TaxRepository,
)
from kamioun.repositories.partner_repository import (
    PartnerRepository,
    SkuPartnerRepository,
    SourceRepository,
    StockRepository,
)
from kamioun.repositories.favorite_repository import FavoritePartnerRepository, FavoriteProductRepository
from kamioun.repositories.banner_repository import BannerRepository
from kamioun.repositories.order_repository import (
    OrderItemRepository,
    OrderRepository,
    OrderStatusRepository,
    PaymentMethodRepository,
    ReservationItemRepository,
    ReservationRepository,
)
from kamioun.repositories.cart_repository import CartRepository
from kamioun.repositories.purchase_repository import (
    ManufacturerRepository,
    PurchaseOrderRepository,
    WarehouseRepository,
)

__all__ = [
    'CustomerRepository',
    'PasswordResetTokenRepository',
    'BrandRepository',
    'ProductRepository',
    'ProductSubCategoryRepository',
    'RelatedProductRepository',
    'TaxRepository',
    'PartnerRepository',
    'SkuPartnerRepository',
    'SourceRepository',
    'StockRepository',
    'FavoritePartnerRepository',
    'FavoriteProductRepository',
    'BannerRepository',
    'OrderItemRepository',
    'OrderRepository',
    'OrderStatusRepository',
    'PaymentMethodRepository',
    'ReservationItemRepository',
    'ReservationRepository',
    'CartRepository',
    'ManufacturerRepository',
    'PurchaseOrderRepository',
    'WarehouseRepository',
]
