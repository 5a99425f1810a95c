"""
Declarative rule table for transfer detection and classification.

Every heuristic the matcher and classifier apply is a list of lowercase
substrings held here, so rules can be tuned per user or institution
without touching control flow.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Iterable, Tuple

DEFAULT_TRANSFER_WINDOW_MINUTES = 10

# Institutions the user holds accounts with
DEFAULT_OWN_BANKS: Tuple[str, ...] = (
    "axis bank",
    "hdfc bank",
    "hsbc",
    "icici bank",
    "idfc first bank",
)

# Raw message words suggesting money moved between accounts
DEFAULT_TRANSFER_INDICATORS: Tuple[str, ...] = (
    "transfer",
    "credited",
    "debited",
    "account",
    "balance",
)

DEFAULT_GENERIC_TRANSFER_MERCHANTS: Tuple[str, ...] = ("credit", "debit", "transfer")

# Known personal counterparties whose payments are transfers
DEFAULT_PERSONAL_TRANSFER_ALIASES: Tuple[str, ...] = ("mubarak m",)

DEFAULT_EXPLICIT_TRANSFER_PHRASES: Tuple[str, ...] = (
    "credited to",
    "debited from",
    "transfer to",
    "transfer from",
)

DEFAULT_CREDIT_CARD_INDICATORS: Tuple[str, ...] = (
    "credit card",
    "card ending with",
    "available limit",
    "payment received towards your credit card",
    "payment of rs",
    "cardmember",
)

DEFAULT_TRANSFER_MERCHANT_PATTERNS: Tuple[str, ...] = (
    "credit card payment",
    "cc payment",
    "card payment",
    "payment to credit card",
    "credit card bill",
    "cc payment to xx",
    "auto transfer",
    "scheduled transfer",
)

DEFAULT_TRANSFER_CATEGORIES: Tuple[str, ...] = (
    "credit card payment",
    "loan payment",
    "investment transfer",
)

DEFAULT_BILL_PAYMENT_KEYWORDS: Tuple[str, ...] = (
    "electricity", "gas", "water", "internet", "mobile", "phone",
    "insurance", "premium", "utility", "bill", "recharge",
    "reliance jio", "airtel", "vodafone", "bsnl",
    "electricity board", "bescom", "kseb", "mseb",
    "credit card payment", "loan payment", "emi payment",
    "cc payment", "card payment",
)

DEFAULT_METHOD_LABELS: Dict[str, str] = {
    "upi": "UPI",
    "credit card": "Card",
    "account": "Account",
    "neft": "NEFT",
    "rtgs": "RTGS",
    "imps": "IMPS",
    "atm": "ATM",
    "interest": "Interest",
}

CREDIT_CARD_METHOD = "credit card"
GENERIC_DEBIT_MERCHANT = "debit"


def normalize(text: str) -> str:
    """Lowercase and trim free text for comparison"""
    return (text or "").strip().lower()


def contains_any(text: str, patterns: Iterable[str]) -> bool:
    """Case-insensitive substring test against a pattern list"""
    haystack = (text or "").lower()
    if not haystack:
        return False
    return any(pattern in haystack for pattern in patterns)


def _lowered(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(normalize(v) for v in values if normalize(v))


@dataclass(frozen=True)
class RuleSet:
    """Tunable pattern lists consulted by the matcher and classifier"""

    transfer_window: timedelta = timedelta(minutes=DEFAULT_TRANSFER_WINDOW_MINUTES)
    own_banks: Tuple[str, ...] = DEFAULT_OWN_BANKS
    transfer_indicators: Tuple[str, ...] = DEFAULT_TRANSFER_INDICATORS
    generic_transfer_merchants: Tuple[str, ...] = DEFAULT_GENERIC_TRANSFER_MERCHANTS
    personal_transfer_aliases: Tuple[str, ...] = DEFAULT_PERSONAL_TRANSFER_ALIASES
    explicit_transfer_phrases: Tuple[str, ...] = DEFAULT_EXPLICIT_TRANSFER_PHRASES
    credit_card_indicators: Tuple[str, ...] = DEFAULT_CREDIT_CARD_INDICATORS
    transfer_merchant_patterns: Tuple[str, ...] = DEFAULT_TRANSFER_MERCHANT_PATTERNS
    transfer_categories: Tuple[str, ...] = DEFAULT_TRANSFER_CATEGORIES
    bill_payment_keywords: Tuple[str, ...] = DEFAULT_BILL_PAYMENT_KEYWORDS
    method_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_METHOD_LABELS))

    def __post_init__(self) -> None:
        # Frozen: normalise through object.__setattr__
        for name in (
            "own_banks",
            "transfer_indicators",
            "generic_transfer_merchants",
            "personal_transfer_aliases",
            "explicit_transfer_phrases",
            "credit_card_indicators",
            "transfer_merchant_patterns",
            "transfer_categories",
            "bill_payment_keywords",
        ):
            object.__setattr__(self, name, _lowered(getattr(self, name)))
        object.__setattr__(
            self,
            "method_labels",
            {normalize(k): v for k, v in self.method_labels.items()},
        )

    @property
    def transfer_merchants(self) -> Tuple[str, ...]:
        """Generic transfer merchants plus personal transfer aliases"""
        return self.generic_transfer_merchants + self.personal_transfer_aliases

    @classmethod
    def from_settings(cls, settings: Any) -> "RuleSet":
        """Build a rule set from application settings"""
        return cls(
            transfer_window=timedelta(minutes=settings.transfer_window_minutes),
            own_banks=tuple(settings.own_banks),
            transfer_indicators=tuple(settings.transfer_indicators),
            generic_transfer_merchants=tuple(settings.generic_transfer_merchants),
            personal_transfer_aliases=tuple(settings.personal_transfer_aliases),
            explicit_transfer_phrases=tuple(settings.explicit_transfer_phrases),
            credit_card_indicators=tuple(settings.credit_card_indicators),
            transfer_merchant_patterns=tuple(settings.transfer_merchant_patterns),
            transfer_categories=tuple(settings.transfer_categories),
            bill_payment_keywords=tuple(settings.bill_payment_keywords),
            method_labels=dict(settings.method_labels),
        )


DEFAULT_RULES = RuleSet()
