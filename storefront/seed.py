import logging
from typing import Dict, List

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Product

logger = logging.getLogger(__name__)


class StorefrontProfile(BaseModel):
    name: str
    title: str
    port: int
    products: List[dict]


TOKO = StorefrontProfile(
    name="toko",
    title="Toko Online",
    port=3000,
    products=[
        {
            "name": "Kaos Basic Premium",
            "price": 79000,
            "stock": 25,
            "category": "Fashion",
            "image_url": "https://picsum.photos/seed/kaos/900/600",
            "description": "Kaos basic bahan lembut, nyaman dipakai harian.",
        },
        {
            "name": "Sepatu Sneakers Urban",
            "price": 299000,
            "stock": 12,
            "category": "Fashion",
            "image_url": "https://picsum.photos/seed/sneakers/900/600",
            "description": "Sneakers gaya urban, ringan dan cocok untuk aktivitas.",
        },
        {
            "name": "Botol Minum Stainless 600ml",
            "price": 119000,
            "stock": 30,
            "category": "Home",
            "image_url": "https://picsum.photos/seed/botol/900/600",
            "description": "Botol minum stainless, menjaga suhu lebih lama.",
        },
        {
            "name": "Headset Wireless",
            "price": 249000,
            "stock": 18,
            "category": "Elektronik",
            "image_url": "https://picsum.photos/seed/headset/900/600",
            "description": "Headset wireless dengan mic, nyaman dan suara jernih.",
        },
        {
            "name": "Lampu Meja Minimalis",
            "price": 159000,
            "stock": 10,
            "category": "Home",
            "image_url": "https://picsum.photos/seed/lampu/900/600",
            "description": "Lampu meja minimalis untuk ruang kerja.",
        },
    ],
)

ENTREPRENEURSHIP = StorefrontProfile(
    name="entrepreneurship",
    title="Entrepreneurship",
    port=3001,
    products=[
        {
            "name": "Jersey Kobarkan - Home",
            "price": 150000,
            "stock": 20,
            "category": "Jersey Kobarkan",
            "image_url": "https://picsum.photos/seed/jersey1/900/600",
            "description": "Jersey Kobarkan edisi home.",
        },
        {
            "name": "Jersey Kobarkan - Away",
            "price": 150000,
            "stock": 15,
            "category": "Jersey Kobarkan",
            "image_url": "https://picsum.photos/seed/jersey2/900/600",
            "description": "Jersey Kobarkan edisi away.",
        },
        {
            "name": "Merch HME - Pin",
            "price": 25000,
            "stock": 50,
            "category": "Merchandise HME",
            "image_url": "https://picsum.photos/seed/merch1/900/600",
            "description": "Pin merchandise HME.",
        },
        {
            "name": "Merch HME - Keychain",
            "price": 25000,
            "stock": 40,
            "category": "Merchandise HME",
            "image_url": "https://picsum.photos/seed/merch2/900/600",
            "description": "Gantungan kunci merchandise HME.",
        },
    ],
)

PROFILES: Dict[str, StorefrontProfile] = {p.name: p for p in (TOKO, ENTREPRENEURSHIP)}


def seed_if_empty(session: Session, profile: StorefrontProfile) -> int:
    """
    Insert the profile's catalog when the products table is empty.
    Returns the number of products inserted (0 if the catalog already had rows).
    """
    count = session.execute(select(func.count()).select_from(Product)).scalar_one()
    if count > 0:
        return 0
    session.add_all(Product(**p) for p in profile.products)
    session.commit()
    logger.info("Seeded %d products for storefront %r", len(profile.products), profile.name)
    return len(profile.products)
