"""
Order placement: validate a submitted cart against the live catalog, then
persist customer, order header, line items and stock decrements as one
all-or-nothing unit.
"""
import logging
import re
import secrets
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import (
    EmptyCart,
    InsufficientStock,
    InvalidEmail,
    InvalidItem,
    InvalidPayment,
    InvalidShipping,
    MissingField,
    OrderPersistenceFailed,
    ProductNotFound,
    StorefrontError,
)
from .models import Customer, Order, OrderItem, Product
from .schemas import OrderCreate

logger = logging.getLogger(__name__)

SHIPPING_COSTS = {"REGULER": 15000, "EXPRESS": 30000}
PAYMENT_METHODS = ("COD", "TRANSFER")
ORDER_CODE_ATTEMPTS = 5

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ---------- Sanitation ----------
def sanitize_text(value, max_len: int = 2000) -> str:
    if value is None:
        return ""
    return _CONTROL_RE.sub("", str(value).strip())[:max_len]


def is_valid_email(email: str) -> bool:
    if not email:
        return True
    return bool(_EMAIL_RE.match(email))


# ---------- Validated shape ----------
class PricedLine(BaseModel):
    product_id: int
    name: str
    price: int
    qty: int

    @property
    def line_total(self) -> int:
        return self.price * self.qty


class ValidatedOrder(BaseModel):
    name: str
    phone: str
    email: Optional[str]
    address: str
    city: str
    postal_code: str
    shipping_method: str
    shipping_cost: int
    payment_method: str
    notes: Optional[str]
    lines: List[PricedLine]

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines)

    @property
    def total(self) -> int:
        return self.subtotal + self.shipping_cost


class OrderReceipt(BaseModel):
    order_id: int
    order_code: str
    total: int


# ---------- Validator ----------
def validate_order(session: Session, payload: OrderCreate) -> ValidatedOrder:
    """
    Normalize the buyer data and price the cart from the current catalog.

    Client-supplied prices are never read; each product's price and stock are
    fetched from the database. Stock is checked against the cumulative quantity
    requested for that product across all cart lines.
    """
    c = payload.customer
    name = sanitize_text(c.name, 100)
    phone = sanitize_text(c.phone, 30)
    email = sanitize_text(c.email, 120)
    address = sanitize_text(c.address, 300)
    city = sanitize_text(c.city, 80)
    postal_code = sanitize_text(c.postal_code, 12)

    ship = sanitize_text(payload.shipping_method, 20).upper()
    pay = sanitize_text(payload.payment_method, 20).upper()
    notes = sanitize_text(payload.notes, 500)

    if not (name and phone and address and city and postal_code):
        raise MissingField()
    if not is_valid_email(email):
        raise InvalidEmail()
    if ship not in SHIPPING_COSTS:
        raise InvalidShipping()
    if pay not in PAYMENT_METHODS:
        raise InvalidPayment()
    if not payload.items:
        raise EmptyCart()

    requested: Dict[int, int] = {}
    lines: List[PricedLine] = []
    for it in payload.items:
        if it.product_id <= 0 or it.qty <= 0:
            raise InvalidItem()
        p = session.get(Product, it.product_id)
        if p is None:
            raise ProductNotFound(it.product_id)
        requested[p.id] = requested.get(p.id, 0) + it.qty
        if p.stock < requested[p.id]:
            raise InsufficientStock(p.name)
        lines.append(PricedLine(product_id=p.id, name=p.name, price=p.price, qty=it.qty))

    return ValidatedOrder(
        name=name,
        phone=phone,
        email=email or None,
        address=address,
        city=city,
        postal_code=postal_code,
        shipping_method=ship,
        shipping_cost=SHIPPING_COSTS[ship],
        payment_method=pay,
        notes=notes or None,
        lines=lines,
    )


# ---------- Writer ----------
def generate_order_code(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"ORD-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def _insert_order(session: Session, validated: ValidatedOrder, customer_id: int) -> Order:
    """Insert the order header, retrying with a fresh code on a code collision."""
    for attempt in range(1, ORDER_CODE_ATTEMPTS + 1):
        order = Order(
            order_code=generate_order_code(),
            customer_id=customer_id,
            shipping_method=validated.shipping_method,
            shipping_cost=validated.shipping_cost,
            payment_method=validated.payment_method,
            notes=validated.notes,
            subtotal=validated.subtotal,
            total=validated.total,
        )
        try:
            with session.begin_nested():
                session.add(order)
                session.flush()
        except IntegrityError:
            logger.warning("Order code collision on %s (attempt %d)", order.order_code, attempt)
            continue
        return order
    logger.error("Could not allocate a unique order code after %d attempts", ORDER_CODE_ATTEMPTS)
    raise OrderPersistenceFailed()


def reserve_stock(session: Session, line: PricedLine) -> None:
    """
    Decrement stock for one line. The conditional update is the guard against
    concurrent decrements: it matches no row when stock no longer covers qty.
    """
    res = session.execute(
        update(Product)
        .where(Product.id == line.product_id, Product.stock >= line.qty)
        .values(stock=Product.stock - line.qty)
    )
    if res.rowcount != 1:
        raise InsufficientStock(line.name)


def place_order(session: Session, validated: ValidatedOrder) -> OrderReceipt:
    """Write a validated order inside the caller's transaction. Does not commit."""
    customer = Customer(
        name=validated.name,
        phone=validated.phone,
        email=validated.email,
        address=validated.address,
        city=validated.city,
        postal_code=validated.postal_code,
    )
    session.add(customer)
    session.flush()

    order = _insert_order(session, validated, customer.id)

    for line in validated.lines:
        session.add(
            OrderItem(
                order_id=order.id,
                product_id=line.product_id,
                name_snapshot=line.name,
                price_snapshot=line.price,
                qty=line.qty,
                line_total=line.line_total,
            )
        )
        reserve_stock(session, line)
    session.flush()

    return OrderReceipt(order_id=order.id, order_code=order.order_code, total=order.total)


def submit_order(session: Session, payload: OrderCreate) -> OrderReceipt:
    """
    Validate and persist an order as a single atomic unit.

    On SQLite the transaction starts with BEGIN IMMEDIATE so the stock check and
    the stock decrement happen under the same write lock.
    """
    try:
        session.connection(execution_options={"sqlite_begin": "BEGIN IMMEDIATE"})
        validated = validate_order(session, payload)
        receipt = place_order(session, validated)
        session.commit()
    except StorefrontError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Order persistence failed")
        raise OrderPersistenceFailed() from exc

    logger.info("Order %s placed, total %d", receipt.order_code, receipt.total)
    return receipt
