from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from cryptography.fernet import Fernet, InvalidToken

from common.errors import PersistenceError

from .gateway import dump_grid_json, load_grid_json
from .models import STORAGE_KEY, GridState


def _to_fernet(key: str | bytes) -> Fernet:
    """Construct a Fernet instance from a user-provided key.

    The key must be a URL-safe base64-encoded 32-byte key (str or bytes),
    as returned by `cryptography.fernet.Fernet.generate_key()`.
    """
    if isinstance(key, str):
        key_bytes = key.encode("utf-8")
    else:
        key_bytes = key
    return Fernet(key_bytes)


@dataclass
class S3ObjectRef:
    bucket: str
    key: str

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class S3GridStore:
    """
    S3-backed persistence for the grid record, encrypted at rest using Fernet.

    - `load()` returns None when the object does not exist yet.
    - `save(state)` overwrites the object with the full snapshot; the last
      write wins.
    - Every S3, decryption or parse failure surfaces as PersistenceError.
    """

    def __init__(
        self,
        *,
        s3: Optional[object] = None,
        bucket: str,
        key: str = STORAGE_KEY,
        fernet_key: str | bytes,
        region_name: Optional[str] = None,
    ) -> None:
        self._s3 = s3 or boto3.client("s3", region_name=region_name)
        self._obj = S3ObjectRef(bucket=bucket, key=key)
        self._fernet = _to_fernet(fernet_key)

    def load(self) -> Optional[GridState]:
        try:
            resp = self._s3.get_object(Bucket=self._obj.bucket, Key=self._obj.key)
            body = resp["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                return None
            raise PersistenceError(f"Failed to read {self._obj}") from e
        except BotoCoreError as e:
            # Includes streaming failures while reading the body
            raise PersistenceError(f"Failed to read {self._obj}") from e

        try:
            decrypted = self._fernet.decrypt(body)
        except InvalidToken as ex:
            raise PersistenceError("Failed to decrypt grid record: invalid Fernet token") from ex

        return load_grid_json(decrypted)

    def save(self, state: GridState) -> None:
        try:
            ciphertext = self._fernet.encrypt(dump_grid_json(state))
        except (TypeError, ValueError) as ex:
            raise PersistenceError("Grid state is not JSON serializable") from ex

        try:
            self._s3.put_object(
                Bucket=self._obj.bucket,
                Key=self._obj.key,
                Body=ciphertext,
                ContentType="application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            raise PersistenceError(f"Failed to write {self._obj}") from e


__all__ = ["S3GridStore", "S3ObjectRef"]
