"""
Database models
"""
from .customer import Customer, PasswordResetToken, Notification, TypePatente
from .catalog import Brand, Product, ProductImage, Tax, Category, Subcategory, ProductSubCategory, RelatedProduct
from .partner import TypePartner, Partner, Source, SkuPartner, Stock, PartnerSettings, Schedule
from .favorite import FavoriteProduct, FavoritePartner
from .banner import Banner
from .order import OrderPayment, State, Status, Reservation, ReservationItem, Order, OrderItem, Cart, CartItem
from .purchase import (
    Manufacturer,
    Warehouse,
    PurchaseOrder,
    PurchaseComment,
    PurchasePayment,
    PurchaseFile,
    ProductOrdered,
    PurchaseOrderState,
    PaymentMethod,
)

__all__ = [
    "Customer",
    "PasswordResetToken",
    "Notification",
    "TypePatente",
    "Brand",
    "Product",
    "ProductImage",
    "Tax",
    "Category",
    "Subcategory",
    "ProductSubCategory",
    "RelatedProduct",
    "TypePartner",
    "Partner",
    "Source",
    "SkuPartner",
    "Stock",
    "PartnerSettings",
    "Schedule",
    "FavoriteProduct",
    "FavoritePartner",
    "Banner",
    "OrderPayment",
    "State",
    "Status",
    "Reservation",
    "ReservationItem",
    "Order",
    "OrderItem",
    "Cart",
    "CartItem",
    "Manufacturer",
    "Warehouse",
    "PurchaseOrder",
    "PurchaseComment",
    "PurchasePayment",
    "PurchaseFile",
    "ProductOrdered",
    "PurchaseOrderState",
    "PaymentMethod",
]
