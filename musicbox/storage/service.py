"""
Signed streaming URLs for song files kept in Azure Blob Storage.
"""
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Annotated
from fastapi import Depends
from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient, BlobSasPermissions, generate_blob_sas
from ..config import get_settings, Settings, StorageSettings
from ..exceptions import StorageError
import logging

logger = logging.getLogger("storage.blob")


@lru_cache(maxsize=1)
def _get_blob_service_client(connection_string: str) -> BlobServiceClient:
    return BlobServiceClient.from_connection_string(connection_string)


class BlobStorageService:
    def __init__(self, settings: StorageSettings):
        self.settings = settings

    def _client(self) -> BlobServiceClient:
        if not self.settings.connection_string:
            raise StorageError("Blob storage is not configured")
        try:
            return _get_blob_service_client(self.settings.connection_string)
        except (ValueError, AzureError) as e:
            raise StorageError(f"Invalid blob storage configuration: {e}")

    def get_blob_url(self, file_path: str) -> str:
        client = self._client()
        return client.get_blob_client(container=self.settings.container, blob=file_path).url

    def get_sas_token(self, file_path: str, valid_for: timedelta) -> str:
        """Read-only SAS token for one blob, valid for the given time."""
        client = self._client()
        account_key = getattr(client.credential, "account_key", None)
        if not account_key:
            raise StorageError("Blob storage credential cannot sign access tokens")
        try:
            return generate_blob_sas(
                account_name=client.account_name,
                container_name=self.settings.container,
                blob_name=file_path,
                account_key=account_key,
                permission=BlobSasPermissions(read=True),
                expiry=datetime.now(timezone.utc) + valid_for,
            )
        except (ValueError, AzureError) as e:
            raise StorageError(f"Could not sign access token: {e}")

    def get_stream_url(self, file_path: str) -> str:
        """Blob URL with a time-limited SAS token appended."""
        valid_for = timedelta(minutes=self.settings.stream_url_ttl_minutes)
        blob_url = self.get_blob_url(file_path)
        sas_token = self.get_sas_token(file_path, valid_for)
        logger.debug(f"Signed stream URL for {file_path} valid for {valid_for}")
        return f"{blob_url}?{sas_token}"


def get_storage_service(settings: Annotated[Settings, Depends(get_settings)]) -> BlobStorageService:
    return BlobStorageService(settings.storage)

StorageService = Annotated[BlobStorageService, Depends(get_storage_service)]
