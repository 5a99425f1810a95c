"""Configuration management using Pydantic Settings"""

from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict

from cashlens.domain import rules


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "cashlens"
    log_level: str = "INFO"

    # Spreadsheet store
    sheet_api_base: str = "http://localhost:8001/exec"
    sheet_api_key: str = ""
    http_timeout_seconds: float = 30.0
    sheet_batch_size: int = 150
    sheet_max_batches: int = 20

    # Transfer detection
    transfer_window_minutes: float = rules.DEFAULT_TRANSFER_WINDOW_MINUTES
    own_banks: List[str] = list(rules.DEFAULT_OWN_BANKS)
    transfer_indicators: List[str] = list(rules.DEFAULT_TRANSFER_INDICATORS)
    generic_transfer_merchants: List[str] = list(rules.DEFAULT_GENERIC_TRANSFER_MERCHANTS)
    personal_transfer_aliases: List[str] = list(rules.DEFAULT_PERSONAL_TRANSFER_ALIASES)
    explicit_transfer_phrases: List[str] = list(rules.DEFAULT_EXPLICIT_TRANSFER_PHRASES)
    credit_card_indicators: List[str] = list(rules.DEFAULT_CREDIT_CARD_INDICATORS)
    transfer_merchant_patterns: List[str] = list(rules.DEFAULT_TRANSFER_MERCHANT_PATTERNS)
    transfer_categories: List[str] = list(rules.DEFAULT_TRANSFER_CATEGORIES)

    # Classification
    bill_payment_keywords: List[str] = list(rules.DEFAULT_BILL_PAYMENT_KEYWORDS)
    method_labels: Dict[str, str] = dict(rules.DEFAULT_METHOD_LABELS)


settings = Settings()
