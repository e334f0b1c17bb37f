class ReceiptError(Exception):
    """Base class for failures while handling a receipt upload."""


class DecodeError(ReceiptError):
    """The uploaded bytes could not be decoded as an image."""


class OcrServiceError(ReceiptError):
    """The OCR service call failed or returned an unreadable response."""


class StorageError(ReceiptError):
    pass


class StorageConfigError(StorageError):
    """The storage connection string is missing or cannot be parsed."""


class StorageUploadError(StorageError):
    """The blob upload itself failed."""
