import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def parse_admin_emails(raw_value: str | None) -> FrozenSet[str]:
    if not raw_value:
        return frozenset()
    normalized = raw_value.replace(";", ",")
    return frozenset(
        item.strip().lower() for item in normalized.split(",") if item.strip()
    )


@dataclass(frozen=True)
class Settings:
    supabase_url: str = _require_env("SUPABASE_URL")
    supabase_service_role_key: str = _require_env("SUPABASE_SERVICE_ROLE_KEY")
    orders_table: str = os.getenv("ORDERS_TABLE", "orders")
    admin_emails: FrozenSet[str] = parse_admin_emails(os.getenv("ADMIN_EMAILS"))
    viacep_url: str = os.getenv("VIACEP_URL", "https://viacep.com.br/ws")
    cep_lookup_timeout_seconds: float = float(
        os.getenv("CEP_LOOKUP_TIMEOUT_SECONDS", "5")
    )
    cep_debounce_seconds: float = float(os.getenv("CEP_DEBOUNCE_SECONDS", "0.35"))
    catalog_path: str | None = os.getenv("CATALOG_PATH")
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )


settings = Settings()
