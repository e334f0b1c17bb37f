import logging
import uuid

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient

from .config import get_storage_connection_string
from .errors import StorageConfigError, StorageUploadError


class ReceiptBlobStore:
    """Uploads receipt images to the receipts container in Blob Storage."""

    def __init__(self, settings, connection_string_provider=get_storage_connection_string):
        self.container_name = settings.receipts_container
        self.base_url = settings.receipts_base_url
        self._connection_string_provider = connection_string_provider

    def _service_client(self):
        connection_string = self._connection_string_provider()
        if not connection_string:
            raise StorageConfigError("Storage connection string is not configured.")
        try:
            return BlobServiceClient.from_connection_string(connection_string)
        except ValueError as e:
            raise StorageConfigError(f"Storage connection string could not be parsed: {e}") from e

    def upload(self, contents: bytes) -> str:
        """Stores `contents` under a new random .jpg name and returns its URL."""
        blob_name = f"{uuid.uuid4()}.jpg"
        with self._service_client() as service_client:
            blob_client = service_client.get_blob_client(container=self.container_name, blob=blob_name)
            try:
                blob_client.upload_blob(contents)
            except AzureError as e:
                raise StorageUploadError(f"Upload of {blob_name} failed: {e}") from e
            url = f"{self.base_url.rstrip('/')}/{blob_name}" if self.base_url else blob_client.url

        logging.info(f"Receipt image stored as {blob_name} in container '{self.container_name}'.")
        return url
