"""S3-compatible object store backend.

The gallery lives in a single bucket.  Object stores have no directories:
"containers" are key prefixes, discovered with a delimited
``list_objects_v2`` listing where ``CommonPrefixes`` are sub-containers and
``Contents`` are leaf objects.  Creating a file therefore never needs to
create a hierarchy.

Writes are buffered in a spooled temporary file and uploaded when the writer
is committed.  ``upload_fileobj`` aborts a failed multipart upload, so an
object is either fully written or not present at all.

Works with any S3-compatible endpoint; the default configuration targets the
Storj DCS S3 gateway.
"""

from __future__ import annotations

import io
import logging
import mimetypes
import posixpath
import tempfile
from collections.abc import Iterable, Iterator
from typing import Any, BinaryIO

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from picgallery.core.config import GalleryConfig
from picgallery.core.exceptions import ListingError, StorageReadError, StorageWriteError

from .base import ORIGINALS_ROOT, BackendBase, StorageWriter, backend_registry, original_path

logger = logging.getLogger(__name__)

# Uploads larger than this spill from memory to a temporary file
SPOOL_MAX_SIZE = 8 * 1024 * 1024

_CLIENT_ERRORS = (BotoCoreError, ClientError)


class S3ObjectReader(io.RawIOBase):
    """Readable stream over a ``get_object`` response body."""

    def __init__(self, path: str, body: Any) -> None:
        super().__init__()
        self.path = path
        self._body = body

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        try:
            data = self._body.read(len(buffer))
        except _CLIENT_ERRORS as e:
            raise StorageReadError(f"Failed to read {self.path}: {e}", path=self.path) from e
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        if not self.closed:
            self._body.close()
        super().close()


class S3ObjectWriter(StorageWriter):
    """Writer that uploads its buffered content when committed."""

    def __init__(self, path: str, client: Any, bucket: str) -> None:
        super().__init__(path)
        self._client = client
        self._bucket = bucket
        self._buffer = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)

    def _write(self, data: bytes) -> int:
        return self._buffer.write(data)

    def _commit(self) -> None:
        extra_args = {}
        content_type, _ = mimetypes.guess_type(self.path)
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            self._buffer.seek(0)
            self._client.upload_fileobj(
                self._buffer, self._bucket, self.path, ExtraArgs=extra_args or None
            )
        except (*_CLIENT_ERRORS, S3UploadFailedError) as e:
            raise StorageWriteError(f"Failed to upload {self.path}: {e}", path=self.path) from e
        finally:
            self._buffer.close()

        logger.debug(f"Uploaded s3://{self._bucket}/{self.path}")

    def _abort(self) -> None:
        self._buffer.close()
        logger.debug(f"Discarded upload to s3://{self._bucket}/{self.path}")


@backend_registry.register
class S3Backend(BackendBase):
    """Backend for a bucket on an S3-compatible object store."""

    name = "s3"
    description = "S3-compatible object store bucket"

    def __init__(self, client: Any, bucket: str) -> None:
        self.client = client
        self.bucket = bucket
        logger.info(f"Using s3 backend for bucket {self.bucket}")

    @classmethod
    def from_config(cls, config: GalleryConfig) -> S3Backend:
        config.require_remote()

        client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            region_name=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key.get_secret_value(),
        )
        return cls(client, config.bucket)

    def _list_prefix(self, prefix: str) -> Iterator[dict]:
        """Yield delimited ``list_objects_v2`` pages under ``prefix``."""
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            yield from paginator.paginate(Bucket=self.bucket, Prefix=prefix, Delimiter="/")
        except _CLIENT_ERRORS as e:
            raise ListingError(
                f"Failed to list s3://{self.bucket}/{prefix}: {e}", path=prefix
            ) from e

    def _list_album_names(self) -> Iterable[str]:
        names = []
        for page in self._list_prefix(ORIGINALS_ROOT + "/"):
            for common_prefix in page.get("CommonPrefixes", []):
                names.append(posixpath.basename(common_prefix["Prefix"].rstrip("/")))
        return names

    def _list_picture_names(self, album: str) -> Iterable[str]:
        prefix = original_path(album) + "/"
        names = []
        for page in self._list_prefix(prefix):
            for item in page.get("Contents", []):
                # zero-byte directory markers share the prefix key
                if item["Key"] == prefix:
                    continue
                names.append(posixpath.basename(item["Key"]))
        return names

    def create_file(self, path: str) -> S3ObjectWriter:
        try:
            return S3ObjectWriter(path, self.client, self.bucket)
        except OSError as e:
            raise StorageWriteError(f"Failed to create buffer for {path}: {e}", path=path) from e

    def open_file(self, path: str) -> BinaryIO:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=path)
        except _CLIENT_ERRORS as e:
            raise StorageReadError(
                f"Failed to open s3://{self.bucket}/{path}: {e}", path=path
            ) from e

        return io.BufferedReader(S3ObjectReader(path, response["Body"]))
