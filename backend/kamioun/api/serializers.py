"""
Response shaping for ORM models

Models only know their own columns (SerializerMixin.to_dict); the nested
shapes the marketplace and admin clients expect are assembled here.
"""
from typing import Optional

from kamioun.core.storage import StorageService
from kamioun.models import (
    Cart,
    Customer,
    Order,
    Partner,
    Product,
    PurchaseOrder,
    Reservation,
)


def _maybe(obj, fn=None):
    if obj is None:
        return None
    return fn(obj) if fn else obj.to_dict()


def partner_public(partner: Optional[Partner]) -> Optional[dict]:
    return _maybe(partner, lambda p: p.to_public_dict())


def customer_public(customer: Optional[Customer]) -> Optional[dict]:
    return _maybe(customer, lambda c: c.to_public_dict())


def product_summary(product: Optional[Product], storage: Optional[StorageService] = None) -> Optional[dict]:
    if product is None:
        return None
    data = product.to_dict()
    if storage is not None:
        data["image"] = storage.resolve_product_image(product.image)
    return data


def product_detail(product: Product, storage: StorageService, include_brand: bool = False) -> dict:
    """
    Product with images, partner offers (stock per source), subcategories
    and related products; local image paths resolved to storage URLs
    """
    data = product_summary(product, storage)
    data["images"] = [
        {**image.to_dict(), "url": storage.resolve_product_image(image.url)}
        for image in product.images
    ]
    data["sku_partners"] = [
        {
            **sku_partner.to_dict(),
            "partner": partner_public(sku_partner.partner),
            "stock": [
                {**stock.to_dict(), "source": _maybe(stock.source)}
                for stock in sku_partner.stock
            ],
        }
        for sku_partner in product.sku_partners
    ]
    data["product_subcategories"] = [
        {**psc.to_dict(), "subcategory": _maybe(psc.subcategory)}
        for psc in product.product_subcategories
    ]
    data["related_products"] = [
        {**related.to_dict(), "related_product": product_summary(related.related_product, storage)}
        for related in product.related_products
    ]
    if include_brand:
        data["brand"] = _maybe(product.brand)
    return data


def customer_detail(customer: Customer, relations=("orders", "reservations")) -> dict:
    data = customer.to_public_dict()
    for relation in relations:
        data[relation] = [row.to_dict() for row in getattr(customer, relation)]
    return data


def reservation_detail(reservation: Reservation) -> dict:
    data = reservation.to_dict()
    data["reservation_items"] = [
        {
            **item.to_dict(),
            "product": product_summary(item.product),
            "source": _maybe(item.source),
            "partner": partner_public(item.partner),
        }
        for item in reservation.items
    ]
    data["customer"] = customer_public(reservation.customer)
    data["payment_method"] = _maybe(reservation.payment_method)
    return data


def order_detail(order: Order) -> dict:
    data = order.to_dict()
    data["status"] = _maybe(order.status)
    data["state"] = _maybe(order.state)
    data["customer"] = customer_public(order.customer)
    data["reservation"] = _maybe(order.reservation)
    data["payment_method"] = _maybe(order.payment_method)
    data["order_items"] = [
        {
            **item.to_dict(),
            "product": product_summary(item.product),
            "source": _maybe(item.source),
            "partner": partner_public(item.partner),
        }
        for item in order.items
    ]
    return data


def purchase_order_detail(purchase_order: PurchaseOrder) -> dict:
    data = purchase_order.to_dict()
    data["manufacturer"] = _maybe(purchase_order.manufacturer)
    data["warehouse"] = _maybe(purchase_order.warehouse)
    for relation in ("comments", "payments", "files", "products"):
        data[relation] = [row.to_dict() for row in getattr(purchase_order, relation)]
    return data


def cart_detail(cart: Optional[Cart]) -> dict:
    if cart is None:
        return {"items": []}
    data = cart.to_dict()
    data["items"] = [item.to_dict() for item in cart.items]
    return data
