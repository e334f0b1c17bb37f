from receipt_handler.config import (
    DEFAULT_OCR_ENDPOINT,
    get_settings,
    get_storage_connection_string,
)


def test_defaults(monkeypatch):
    for name in ("OCR_ENDPOINT", "OCR_SUBSCRIPTION_KEY", "OCR_TIMEOUT_SECONDS", "RECEIPTS_CONTAINER", "RECEIPTS_BASE_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.ocr_endpoint == DEFAULT_OCR_ENDPOINT
    assert settings.ocr_subscription_key == ""
    assert settings.ocr_timeout is None
    assert settings.receipts_container == "receipts"
    assert settings.receipts_base_url is None


def test_reads_environment_once(monkeypatch):
    monkeypatch.setenv("OCR_ENDPOINT", "https://westus.api.cognitive.microsoft.com/vision/v2.0/ocr")
    monkeypatch.setenv("OCR_TIMEOUT_SECONDS", "12.5")
    settings = get_settings()

    monkeypatch.setenv("OCR_ENDPOINT", "https://changed.test")

    assert get_settings() is settings
    assert settings.ocr_endpoint == "https://westus.api.cognitive.microsoft.com/vision/v2.0/ocr"
    assert settings.ocr_timeout == 12.5


def test_invalid_timeout_is_ignored(monkeypatch):
    monkeypatch.setenv("OCR_TIMEOUT_SECONDS", "soon")
    assert get_settings().ocr_timeout is None


def test_storage_connection_string_is_read_each_call(monkeypatch):
    monkeypatch.setenv("AzureWebJobsStorage", "first")
    assert get_storage_connection_string() == "first"
    monkeypatch.setenv("AzureWebJobsStorage", "second")
    assert get_storage_connection_string() == "second"
