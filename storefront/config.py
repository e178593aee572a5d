import os
from typing import Optional

from pydantic import BaseModel

from .seed import PROFILES, StorefrontProfile

DEFAULT_ADMIN_USER = "admin"
DEFAULT_ADMIN_PASS = "admin123"


class Settings(BaseModel):
    profile_name: str = "toko"
    database_url: str = "sqlite:///store.db"
    host: str = "0.0.0.0"
    port: Optional[int] = None
    admin_user: str = DEFAULT_ADMIN_USER
    admin_pass: str = DEFAULT_ADMIN_PASS
    seed_on_startup: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        port = os.getenv("PORT", "").strip()
        return cls(
            profile_name=os.getenv("STORE_PROFILE", "toko").strip().lower(),
            database_url=os.getenv("DATABASE_URL", "sqlite:///store.db"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(port) if port else None,
            admin_user=os.getenv("ADMIN_USER", DEFAULT_ADMIN_USER),
            admin_pass=os.getenv("ADMIN_PASS", DEFAULT_ADMIN_PASS),
            seed_on_startup=os.getenv("SEED_ON_STARTUP", "1").strip().lower() not in ("0", "false", "no"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def profile(self) -> StorefrontProfile:
        try:
            return PROFILES[self.profile_name]
        except KeyError:
            raise ValueError(
                f"unknown STORE_PROFILE {self.profile_name!r}, expected one of {sorted(PROFILES)}"
            ) from None

    @property
    def listen_port(self) -> int:
        return self.port if self.port is not None else self.profile.port

    @property
    def uses_default_admin_credentials(self) -> bool:
        return self.admin_user == DEFAULT_ADMIN_USER and self.admin_pass == DEFAULT_ADMIN_PASS
