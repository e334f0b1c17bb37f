import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

DEFAULT_OCR_ENDPOINT = "https://australiaeast.api.cognitive.microsoft.com/vision/v2.0/ocr"
DEFAULT_RECEIPTS_CONTAINER = "receipts"

# App setting holding the storage connection string, shared with the Functions host.
STORAGE_CONNECTION_SETTING = "AzureWebJobsStorage"


@dataclass(frozen=True)
class Settings:
    ocr_endpoint: str = DEFAULT_OCR_ENDPOINT
    ocr_subscription_key: str = ""
    ocr_timeout: Optional[float] = None
    receipts_container: str = DEFAULT_RECEIPTS_CONTAINER
    receipts_base_url: Optional[str] = None


def _read_timeout(raw_value):
    if not raw_value:
        return None
    try:
        return float(raw_value)
    except ValueError:
        logging.warning(f"Ignoring invalid OCR_TIMEOUT_SECONDS value: {raw_value!r}")
        return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Builds the process-wide settings from the app settings (environment).
    Cached, so every invocation in the same worker sees the same values.
    """
    return Settings(
        ocr_endpoint=os.environ.get("OCR_ENDPOINT") or DEFAULT_OCR_ENDPOINT,
        ocr_subscription_key=os.environ.get("OCR_SUBSCRIPTION_KEY", ""),
        ocr_timeout=_read_timeout(os.environ.get("OCR_TIMEOUT_SECONDS")),
        receipts_container=os.environ.get("RECEIPTS_CONTAINER") or DEFAULT_RECEIPTS_CONTAINER,
        receipts_base_url=os.environ.get("RECEIPTS_BASE_URL") or None,
    )


def get_storage_connection_string() -> Optional[str]:
    # Not cached; read at upload time.
    return os.environ.get(STORAGE_CONNECTION_SETTING)
