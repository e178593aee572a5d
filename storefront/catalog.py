import re
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .checkout import sanitize_text
from .errors import InvalidArgument, NotFound
from .models import MAX_ID, Product

LIST_LIMIT = 200
ALL_CATEGORIES = "ALL"

_ID_RE = re.compile(r"^\d+$")

SORTS = {
    "newest": (Product.created_at.desc(), Product.id.desc()),
    "price_asc": (Product.price.asc(), Product.id.asc()),
    "price_desc": (Product.price.desc(), Product.id.asc()),
}


def parse_id(raw) -> int:
    """Parse a path identifier; anything but a positive integer is InvalidArgument."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        text = str(raw).strip() if raw is not None else ""
        if not _ID_RE.match(text):
            raise InvalidArgument("Invalid id")
        value = int(text)
    if value <= 0:
        raise InvalidArgument("Invalid id")
    return value


def list_products(
    session: Session,
    text: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
) -> List[Product]:
    q = sanitize_text(text, 100)
    category = sanitize_text(category, 50)
    sort = sanitize_text(sort, 30)

    stmt = select(Product)
    if q:
        stmt = stmt.where(
            or_(
                Product.name.icontains(q, autoescape=True),
                Product.category.icontains(q, autoescape=True),
            )
        )
    if category and category != ALL_CATEGORIES:
        stmt = stmt.where(Product.category == category)

    stmt = stmt.order_by(*SORTS.get(sort, SORTS["newest"])).limit(LIST_LIMIT)
    return list(session.execute(stmt).scalars().all())


def get_product(session: Session, product_id) -> Product:
    pid = parse_id(product_id)
    p = session.get(Product, pid) if pid <= MAX_ID else None
    if not p:
        raise NotFound("Product")
    return p


def list_categories(session: Session) -> List[str]:
    rows = session.execute(select(Product.category).distinct().order_by(Product.category)).scalars().all()
    return [c for c in rows if c]
