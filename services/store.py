"""Object-store access for Markdown documents (S3-compatible buckets via boto3)."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageEntry:
    key: str
    last_modified: datetime | None = None

    @property
    def timestamp(self) -> float:
        """Last-modified as epoch seconds; 0.0 when the store did not report one."""
        return self.last_modified.timestamp() if self.last_modified else 0.0


class ObjectStore(Protocol):
    def list_entries(self) -> list[StorageEntry] | None: ...

    def read_text(self, key: str) -> str: ...


class S3Store:
    """List and read documents from one bucket.

    The boto3 client is created on first use so constructing the store never
    touches the network or credential chain.
    """

    def __init__(
        self,
        bucket: str,
        *,
        endpoint: str | None = None,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        suffix: str = ".md",
        client=None,
    ):
        self.bucket = bucket
        self.endpoint = endpoint
        self.region = region
        self.suffix = suffix
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint or None,
                region_name=self.region or None,
                aws_access_key_id=self._access_key_id or None,
                aws_secret_access_key=self._secret_access_key or None,
            )
        return self._client

    def list_entries(self) -> list[StorageEntry] | None:
        """All document keys in the bucket, or None when the listing failed."""
        entries = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                for obj in page.get("Contents", []):
                    key = obj.get("Key")
                    if key and key.endswith(self.suffix):
                        entries.append(StorageEntry(key, obj.get("LastModified")))
        except (BotoCoreError, ClientError) as e:
            log.error("Listing bucket %s failed: %s", self.bucket, e)
            return None
        return entries

    def read_text(self, key: str) -> str:
        response = self.client.get_object(Bucket=self.bucket, Key=key)
        return response["Body"].read().decode("utf-8")


def object_url(base_url: str, path: str) -> str:
    """Public URL for an object path, percent-encoding each segment."""
    encoded = "/".join(quote(segment, safe="") for segment in path.lstrip("/").split("/"))
    if not base_url:
        return encoded
    return f"{base_url.rstrip('/')}/{encoded}"
