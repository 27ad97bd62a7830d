"""Purchase engine configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional
import os


@dataclass(frozen=True)
class PurchaseConfig:
    """Configuration values injected into the purchase components."""

    default_currency: str = "USD"
    payment_processor_label: str = "Payment processor"
    card_ending_phrase: str = "ending in"
    sandbox_decline_threshold: Optional[Decimal] = None


def _to_decimal(value: Optional[str], *, default: Optional[Decimal]) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    try:
        return Decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Expected decimal value, got {value!r}") from exc


def load_purchase_config(env: Optional[Mapping[str, str]] = None) -> PurchaseConfig:
    """Load :class:`PurchaseConfig` from environment variables."""

    env_mapping = os.environ if env is None else env

    default_currency = (env_mapping.get("PURCHASE_DEFAULT_CURRENCY") or "USD").strip().upper() or "USD"
    payment_processor_label = env_mapping.get("PURCHASE_PAYMENT_PROCESSOR_LABEL", "Payment processor")
    card_ending_phrase = env_mapping.get("PURCHASE_CARD_ENDING_PHRASE", "ending in")
    sandbox_decline_threshold = _to_decimal(
        env_mapping.get("PURCHASE_SANDBOX_DECLINE_ABOVE"), default=None
    )

    return PurchaseConfig(
        default_currency=default_currency,
        payment_processor_label=payment_processor_label,
        card_ending_phrase=card_ending_phrase,
        sandbox_decline_threshold=sandbox_decline_threshold,
    )
