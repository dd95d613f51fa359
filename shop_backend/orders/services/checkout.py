# orders/services/checkout.py

"""
CHECKOUT (CART -> PENDING ORDER + PAYMENT INTENT)

Server-authoritative:
- every line is re-priced from the live catalog (base price + customization
  modifiers resolved from the product schema); client prices are ignored
- required customizations are enforced here, not in the pricer
- non-refundable lines need the buyer's explicit acceptance
- delivery cost comes from settings.DELIVERY_METHODS

Money contract:
- Order.total         = sum of item snapshot price_total
- Order.delivery_cost = delivery method cost (separate)
- payment intent      = Order.grand_total (total + delivery_cost)

The order row and the payment intent are created in one transaction: a
gateway failure rolls the order back.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from django.conf import settings
from django.db import transaction

from catalog.customization import line_total, resolve_selections, selection_summary, validate_required
from catalog.models import Product
from core.exceptions import NotFoundError, ValidationError
from core.money import ZERO, money, money_str
from orders.models import Order
from orders.services.stripe import create_payment_intent

logger = logging.getLogger(__name__)

POSTAL_CODE_RE = re.compile(r"^\d{2}-\d{3}$")

DELIVERY_INPOST_LOCKER = "inpost_locker"
DELIVERY_COURIER = "courier"
DELIVERY_PICKUP = "pickup"


@dataclass(frozen=True)
class CheckoutLine:
    product_id: str
    quantity: int = 1
    customizations: list = field(default_factory=list)
    non_refundable_accepted: bool = False


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    client_secret: str
    payment_intent_id: str


def delivery_options() -> list[dict]:
    methods = getattr(settings, "DELIVERY_METHODS", {}) or {}
    return [
        {"code": code, "label": cfg.get("label", code), "cost": money_str(cfg.get("cost"))}
        for code, cfg in methods.items()
    ]


def resolve_delivery(method: str | None) -> tuple[str, object]:
    methods = getattr(settings, "DELIVERY_METHODS", {}) or {}
    code = (method or "").strip() or getattr(settings, "DEFAULT_DELIVERY_METHOD", "")
    cfg = methods.get(code)
    if cfg is None:
        raise ValidationError(
            f"Unknown delivery method '{code}'", code="INVALID_DELIVERY_METHOD"
        )
    return code, money(cfg.get("cost"))


def validate_delivery_details(*, method: str, shipping_address: dict, delivery_details: dict):
    if method == DELIVERY_INPOST_LOCKER:
        if not str((delivery_details or {}).get("locker_id") or "").strip():
            raise ValidationError(
                "A parcel locker must be selected", code="INVALID_DELIVERY_DETAILS"
            )
        return

    if method == DELIVERY_COURIER:
        address = shipping_address or {}
        missing = [k for k in ("street", "city", "postalCode") if not str(address.get(k) or "").strip()]
        if missing:
            raise ValidationError(
                f"Shipping address incomplete: {', '.join(missing)}",
                code="INVALID_DELIVERY_DETAILS",
            )
        if not POSTAL_CODE_RE.match(str(address["postalCode"]).strip()):
            raise ValidationError("Postal code format: 00-000", code="INVALID_DELIVERY_DETAILS")


def build_item_snapshot(*, product: Product, line: CheckoutLine) -> dict:
    """Price one line from live catalog data and freeze it."""
    if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity < 1:
        raise ValidationError(
            f"'{product.name}': quantity must be a positive integer", code="INVALID_QUANTITY"
        )

    schema = product.parsed_customization
    selections, customization_price = resolve_selections(
        schema, line.customizations, base_price=product.price
    )
    validate_required(schema, selections)

    non_refundable = bool(schema and schema.non_refundable)
    if non_refundable and not line.non_refundable_accepted:
        raise ValidationError(
            f"'{product.name}' is non-refundable and must be accepted before payment",
            code="NON_REFUNDABLE_NOT_ACCEPTED",
        )

    return {
        "product_id": str(product.id),
        "name": product.name,
        "image": product.cover_image,
        "unit_price": money_str(product.price),
        "customizations": selections,
        "customization_price": money_str(customization_price),
        "customization_summary": [selection_summary(s) for s in selections],
        "quantity": line.quantity,
        "price_total": money_str(line_total(product.price, customization_price, line.quantity)),
        "non_refundable": non_refundable,
        "non_refundable_reason": schema.non_refundable_reason if non_refundable else "",
    }


def build_order_items(lines) -> list[dict]:
    lines = list(lines or [])
    if not lines:
        raise ValidationError("Cart is empty", code="EMPTY_CART")

    wanted = {str(line.product_id) for line in lines}
    products = {
        str(p.id): p for p in Product.objects.filter(id__in=wanted, is_active=True)
    }

    items = []
    for line in lines:
        product = products.get(str(line.product_id))
        if product is None:
            raise NotFoundError(f"Product not found: {line.product_id}")
        if not product.is_purchasable:
            raise ValidationError(
                f"'{product.name}' is currently unavailable", code="PRODUCT_UNAVAILABLE"
            )
        items.append(build_item_snapshot(product=product, line=line))
    return items


def items_total(items) -> object:
    return money(sum((money(i["price_total"]) for i in items), ZERO))


@transaction.atomic
def create_order_with_payment_intent(
    *,
    lines,
    customer_email: str,
    customer_name: str = "",
    customer_phone: str = "",
    shipping_address: dict | None = None,
    delivery_method: str | None = None,
    delivery_details: dict | None = None,
    user=None,
) -> CheckoutResult:
    items = build_order_items(lines)

    method, delivery_cost = resolve_delivery(delivery_method)
    validate_delivery_details(
        method=method,
        shipping_address=shipping_address or {},
        delivery_details=delivery_details or {},
    )

    order = Order.objects.create(
        user=user if getattr(user, "is_authenticated", False) else None,
        items=items,
        total=items_total(items),
        delivery_method=method,
        delivery_cost=delivery_cost,
        delivery_details=delivery_details or {},
        currency=settings.SHOP_CURRENCY,
        shipping_address=shipping_address or {},
        customer_email=customer_email.strip(),
        customer_name=(customer_name or "").strip(),
        customer_phone=(customer_phone or "").strip(),
        has_non_refundable=any(i["non_refundable"] for i in items),
    )

    intent = create_payment_intent(
        amount=order.grand_total,
        currency=order.currency,
        receipt_email=order.customer_email,
        metadata={"order_id": str(order.id), "order_no": order.order_no},
        idempotency_key=f"order-{order.id}",
    )

    order.payment_intent_id = intent["id"]
    order.save(update_fields=["payment_intent_id", "updated_at"])

    logger.info(
        "Checkout order created",
        extra={
            "order_id": str(order.id),
            "payment_intent_id": intent["id"],
            "total": str(order.total),
            "grand_total": str(order.grand_total),
        },
    )

    return CheckoutResult(
        order=order,
        client_secret=intent["client_secret"],
        payment_intent_id=intent["id"],
    )
