"""Runtime settings, read from the environment.

| Variable                  | Default                     |
|---------------------------|-----------------------------|
| RXDRAFT_API_BASE_URL      | http://localhost:8080/api   |
| RXDRAFT_API_TOKEN         | (none)                      |
| RXDRAFT_TIMEOUT           | 10 (seconds)                |
| RXDRAFT_SEARCH_DEBOUNCE   | 0.3 (seconds)               |
| RXDRAFT_TAX_RATE          | 0.10                        |
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.value_objects import to_decimal


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:8080/api"
    api_token: str | None = None
    timeout: float = 10.0
    search_debounce: float = 0.3
    tax_rate: Decimal = Decimal("0.10")

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = Settings()
        return Settings(
            api_base_url=env.get("RXDRAFT_API_BASE_URL", defaults.api_base_url).rstrip("/"),
            api_token=env.get("RXDRAFT_API_TOKEN") or None,
            timeout=_seconds(env, "RXDRAFT_TIMEOUT", defaults.timeout, allow_zero=False),
            search_debounce=_seconds(env, "RXDRAFT_SEARCH_DEBOUNCE", defaults.search_debounce),
            tax_rate=_tax_rate(env, defaults.tax_rate),
        )


def _seconds(
    env: Mapping[str, str], name: str, default: float, allow_zero: bool = True
) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from exc
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ValidationError(f"{name} cannot be negative")
    if value == 0 and not allow_zero:
        raise ValidationError(f"{name} must be greater than 0")
    return value


def _tax_rate(env: Mapping[str, str], default: Decimal) -> Decimal:
    raw = env.get("RXDRAFT_TAX_RATE")
    if raw is None or raw == "":
        return default
    rate = to_decimal(raw)
    if not Decimal("0") <= rate < Decimal("1"):
        raise ValidationError(f"RXDRAFT_TAX_RATE must be in [0, 1), got {raw}")
    return rate
