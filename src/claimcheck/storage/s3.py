"""S3-compatible blob store backend.

Supports:
- AWS S3
- MinIO
- Any S3-compatible object storage

The container name is used as the bucket name.
"""

from __future__ import annotations

import logging
from typing import Any, cast

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from claimcheck.errors import ProtocolMismatchError, StorageError
from claimcheck.storage.base import BlobAttributes, BlobHandle, BlobStore

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
_EXISTS_CODES = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3BlobStore(BlobStore):
    """S3-compatible blob store implementation.

    Uses aioboto3 for async S3 operations.

    Configuration via:
    - endpoint_url: For non-AWS S3-compatible services
    - region_name: AWS region
    - credentials: via AWS SDK defaults or explicit aws_access_key_id/secret_access_key

    S3 returns user metadata keys lower-cased, so `_MessageId` reads back
    as `_messageid`.
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        region_name: str = "us-east-1",
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
    ):
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self._session: aioboto3.Session | None = None

    def _get_session(self) -> aioboto3.Session:
        """Get or create aioboto3 session."""
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self.aws_access_key_id,
                aws_secret_access_key=self.aws_secret_access_key,
                region_name=self.region_name,
            )
        return self._session

    def _client(self) -> Any:
        return self._get_session().client("s3", endpoint_url=self.endpoint_url)

    def _translate(self, exc: Exception, handle: BlobHandle, action: str) -> StorageError:
        if isinstance(exc, ClientError) and _error_code(exc) in _MISSING_CODES:
            return ProtocolMismatchError(
                f"Blob not found: {handle.container}/{handle.name}",
                container=handle.container,
                blob_name=handle.name,
            )
        return StorageError(
            f"{action} failed for {handle.name}: {exc}",
            container=handle.container,
            blob_name=handle.name,
        )

    async def ensure_container(self, name: str) -> None:
        async with self._client() as s3:
            try:
                await s3.head_bucket(Bucket=name)
                return
            except ClientError as exc:
                if _error_code(exc) not in _MISSING_CODES:
                    raise StorageError(
                        f"Cannot access bucket {name}: {exc}", container=name
                    ) from exc
            except BotoCoreError as exc:
                raise StorageError(f"Cannot access bucket {name}: {exc}", container=name) from exc

            # us-east-1 is the default location and rejects an explicit constraint
            create_kwargs: dict[str, Any] = {"Bucket": name}
            if self.region_name and self.region_name != "us-east-1":
                create_kwargs["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.region_name
                }
            try:
                await s3.create_bucket(**create_kwargs)
            except ClientError as exc:
                if _error_code(exc) not in _EXISTS_CODES:
                    raise StorageError(
                        f"Cannot create bucket {name}: {exc}", container=name
                    ) from exc

    async def upload(self, handle: BlobHandle, data: bytes) -> None:
        async with self._client() as s3:
            try:
                await s3.put_object(
                    Bucket=handle.container,
                    Key=handle.name,
                    Body=data,
                    Metadata=dict(handle.metadata),
                )
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, handle, "Upload") from exc

    async def fetch_attributes(self, handle: BlobHandle) -> BlobAttributes:
        async with self._client() as s3:
            try:
                response = await s3.head_object(Bucket=handle.container, Key=handle.name)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, handle, "Fetch attributes") from exc
        metadata = dict(response.get("Metadata") or {})
        return BlobAttributes(length=int(response["ContentLength"]), metadata=metadata)

    async def download(self, handle: BlobHandle) -> bytes:
        async with self._client() as s3:
            try:
                response = await s3.get_object(Bucket=handle.container, Key=handle.name)
                async with response["Body"] as stream:
                    data = await stream.read()
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, handle, "Download") from exc
        return cast(bytes, data)
