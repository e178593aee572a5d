import secrets
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy import select
from sqlalchemy.orm import Session

from .catalog import parse_id
from .errors import NotFound, Unauthorized
from .models import MAX_ID, Customer, Order, OrderItem

basic_auth = HTTPBasic(auto_error=False, realm="Admin")


def check_credentials(credentials: Optional[HTTPBasicCredentials], user: str, password: str) -> bool:
    if credentials is None:
        return False
    user_ok = secrets.compare_digest(credentials.username.encode("utf-8"), user.encode("utf-8"))
    pass_ok = secrets.compare_digest(credentials.password.encode("utf-8"), password.encode("utf-8"))
    return user_ok and pass_ok


def require_admin(request: Request, credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth)) -> str:
    """FastAPI dependency: static admin credentials from app settings, Basic auth semantics."""
    settings = request.app.state.settings
    if not check_credentials(credentials, settings.admin_user, settings.admin_pass):
        raise Unauthorized()
    return credentials.username


def get_order_detail(session: Session, order_id) -> dict:
    """
    Load an order joined with its customer, plus its line items in insertion order.
    """
    oid = parse_id(order_id)
    if oid > MAX_ID:
        raise NotFound("Order")
    row = session.execute(
        select(Order, Customer).join(Customer, Customer.id == Order.customer_id).where(Order.id == oid)
    ).first()
    if row is None:
        raise NotFound("Order")
    order, customer = row

    items = session.execute(
        select(OrderItem).where(OrderItem.order_id == oid).order_by(OrderItem.id)
    ).scalars().all()

    return {
        "order": {
            "id": order.id,
            "order_code": order.order_code,
            "customer_id": order.customer_id,
            "shipping_method": order.shipping_method,
            "shipping_cost": order.shipping_cost,
            "payment_method": order.payment_method,
            "notes": order.notes,
            "subtotal": order.subtotal,
            "total": order.total,
            "status": order.status,
            "created_at": order.created_at,
            "customer_name": customer.name,
            "phone": customer.phone,
            "email": customer.email,
            "address": customer.address,
            "city": customer.city,
            "postal_code": customer.postal_code,
        },
        "items": [
            {
                "product_id": i.product_id,
                "name_snapshot": i.name_snapshot,
                "price_snapshot": i.price_snapshot,
                "qty": i.qty,
                "line_total": i.line_total,
            }
            for i in items
        ],
    }
