"""
Frontend Configuration
Environment-driven settings for the SuitCraft client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


def _get_decimal(*keys: str, default: str) -> Decimal:
    return Decimal(_get_env(*keys, default=default) or default)


@dataclass(frozen=True)
class Settings:
    api_url: str
    token_path: str
    request_timeout: float
    upload_timeout: float
    log_level: str
    shipping_fee: Decimal
    tax_rate: Decimal
    currency: str


def load_settings() -> Settings:
    """Read settings from the environment (and the root .env file)"""
    return Settings(
        api_url=_get_env("SUITCRAFT_API_URL", "VITE_API_URL", default="http://localhost:5000/api/v1"),
        token_path=_get_env(
            "SUITCRAFT_TOKEN_PATH",
            default=str(Path.home() / ".suitcraft" / "token"),
        ),
        request_timeout=_get_float("SUITCRAFT_REQUEST_TIMEOUT", default=10.0),
        upload_timeout=_get_float("SUITCRAFT_UPLOAD_TIMEOUT", default=30.0),
        log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
        shipping_fee=_get_decimal("SUITCRAFT_SHIPPING_FEE", default="100"),
        tax_rate=_get_decimal("SUITCRAFT_TAX_RATE", default="0.18"),
        currency=_get_env("SUITCRAFT_CURRENCY", default="₹") or "₹",
    )


settings = load_settings()
