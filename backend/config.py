import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")

DEFAULT_API_VERSION = "2023-10"


class CapacityLookupPolicy(str, Enum):
    ABORT = "abort"
    SKIP = "skip"


class EmptyOrderPolicy(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class ClaimStoreKind(str, Enum):
    MEMORY = "memory"
    SUPABASE = "supabase"


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_enum(name: str, enum_cls, fallback):
    raw_value = (os.getenv(name) or fallback.value).strip().lower()
    try:
        return enum_cls(raw_value)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in enum_cls)
        raise RuntimeError(f"Invalid value for {name}: {raw_value!r} (expected one of {allowed})") from exc


def _get_float(name: str, fallback: str) -> float:
    raw_value = os.getenv(name, fallback)
    try:
        return float(raw_value)
    except ValueError as exc:
        raise RuntimeError(f"Invalid number for {name}: {raw_value!r}") from exc


def normalize_shop_domain(shop: str) -> str:
    domain = shop.strip().lower()
    for prefix in ("https://", "http://"):
        if domain.startswith(prefix):
            domain = domain[len(prefix):]
    domain = domain.rstrip("/")
    if not domain.endswith(".myshopify.com"):
        domain = f"{domain}.myshopify.com"
    return domain


@dataclass(frozen=True)
class Settings:
    shop: str
    shopify_access_token: str
    shopify_api_version: str = DEFAULT_API_VERSION
    shopify_webhook_secret: str | None = None
    shopify_timeout_seconds: float = 10.0
    capacity_lookup_policy: CapacityLookupPolicy = CapacityLookupPolicy.ABORT
    empty_order_policy: EmptyOrderPolicy = EmptyOrderPolicy.ACCEPT
    split_claim_store: ClaimStoreKind = ClaimStoreKind.MEMORY
    split_claim_ttl_seconds: float = 900.0
    split_claim_retention_seconds: float = 172800.0
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    log_level: str = "INFO"

    @property
    def shop_domain(self) -> str:
        return normalize_shop_domain(self.shop)

    @property
    def admin_api_base_url(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.shopify_api_version}"

    @classmethod
    def from_env(cls) -> "Settings":
        claim_store = _get_enum("SPLIT_CLAIM_STORE", ClaimStoreKind, ClaimStoreKind.MEMORY)
        supabase_url = os.getenv("SUPABASE_URL")
        supabase_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        if claim_store is ClaimStoreKind.SUPABASE:
            supabase_url = _require_env("SUPABASE_URL")
            supabase_key = _require_env("SUPABASE_SERVICE_ROLE_KEY")
        return cls(
            shop=_require_env("SHOP"),
            shopify_access_token=_require_env("SHOPIFY_ACCESS_TOKEN"),
            shopify_api_version=os.getenv("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION,
            shopify_webhook_secret=os.getenv("SHOPIFY_WEBHOOK_SECRET") or None,
            shopify_timeout_seconds=_get_float("SHOPIFY_TIMEOUT_SECONDS", "10"),
            capacity_lookup_policy=_get_enum(
                "CAPACITY_LOOKUP_POLICY", CapacityLookupPolicy, CapacityLookupPolicy.ABORT
            ),
            empty_order_policy=_get_enum("EMPTY_ORDER_POLICY", EmptyOrderPolicy, EmptyOrderPolicy.ACCEPT),
            split_claim_store=claim_store,
            split_claim_ttl_seconds=_get_float("SPLIT_CLAIM_TTL_SECONDS", "900"),
            split_claim_retention_seconds=_get_float("SPLIT_CLAIM_RETENTION_SECONDS", "172800"),
            supabase_url=supabase_url,
            supabase_service_role_key=supabase_key,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
