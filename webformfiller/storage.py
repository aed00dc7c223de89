"""Secure local storage for saved field sets with encryption."""

from __future__ import annotations

import base64
import json
import logging
import secrets
from pathlib import Path
from typing import List, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from models.form_data import FormData

from .config import load_config
from .errors import StorageError

logger = logging.getLogger(__name__)

SALT_FILENAME = "salt.key"
DATA_FILENAME = "formdata.enc"
# OWASP recommends at least 310,000 PBKDF2 iterations; 480,000 keeps a margin.
KDF_ITERATIONS = 480000


class SecureStorage:
    """Handles encrypted local storage of saved field sets.

    Records are kept in insertion order; the last one is what a hotkey fill
    uses.
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        """Initialize storage, creating necessary directories."""
        self.storage_dir = Path(storage_dir) if storage_dir else load_config().storage_dir
        self.salt_file = self.storage_dir / SALT_FILENAME
        self.data_file = self.storage_dir / DATA_FILENAME
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._ensure_salt()

    def _ensure_salt(self) -> None:
        """Ensure a salt file exists for key derivation."""
        if not self.salt_file.exists():
            self.salt_file.write_bytes(secrets.token_bytes(32))
            logger.info("Created new salt file")

    def _get_fernet(self, password: str) -> Fernet:
        """Derive a Fernet cipher from ``password`` using PBKDF2."""
        self._ensure_salt()
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=self.salt_file.read_bytes(),
            iterations=KDF_ITERATIONS,
        )
        return Fernet(base64.urlsafe_b64encode(kdf.derive(password.encode())))

    def load_form_data(self, password: str) -> List[FormData]:
        """Load every saved field set.

        Raises:
            StorageError: If decryption fails or the payload is unreadable.
        """
        if not self.data_file.exists():
            return []

        try:
            decrypted = self._get_fernet(password).decrypt(self.data_file.read_bytes())
            records = [FormData.from_dict(item) for item in json.loads(decrypted.decode())]
        except InvalidToken:
            raise StorageError("Invalid password or corrupted data")
        except Exception as e:
            logger.error(f"Failed to load form data: {e}")
            raise StorageError(f"Failed to load data: {e}") from e

        logger.info(f"Loaded {len(records)} saved field set(s)")
        return records

    def _write(self, records: List[FormData], password: str) -> None:
        try:
            payload = json.dumps([record.to_dict() for record in records], indent=2)
            self.data_file.write_bytes(self._get_fernet(password).encrypt(payload.encode()))
        except Exception as e:
            logger.error(f"Failed to save form data: {e}")
            raise StorageError(f"Failed to save data: {e}") from e

    def add_form_data(self, form_data: FormData, password: str) -> None:
        """Append a field set to storage.

        Raises:
            StorageError: If existing data cannot be decrypted or the write fails.
        """
        records = self.load_form_data(password)
        records.append(form_data)
        self._write(records, password)
        logger.info(f"Saved field set '{form_data.form_name}' with {len(form_data.fields)} field(s)")

    def latest_form_data(self, password: str) -> Optional[FormData]:
        """Return the most recently added field set, if any."""
        records = self.load_form_data(password)
        return records[-1] if records else None

    def delete_form_data(self, record_id: str, password: str) -> bool:
        """Remove one field set by id. Returns False when no record matched."""
        records = self.load_form_data(password)
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            return False
        self._write(remaining, password)
        logger.info(f"Deleted field set {record_id}")
        return True

    def delete_all_data(self) -> None:
        """Delete all stored data and salt. WARNING: This is irreversible!"""
        try:
            if self.data_file.exists():
                self.data_file.unlink()
                logger.info("Deleted encrypted data file")
            if self.salt_file.exists():
                self.salt_file.unlink()
                logger.info("Deleted salt file")
        except Exception as e:
            logger.error(f"Failed to delete data: {e}")
            raise StorageError(f"Failed to delete data: {e}") from e

    def has_stored_data(self) -> bool:
        """Check if any data is currently stored."""
        return self.data_file.exists()


def get_storage(storage_dir: Optional[Path] = None) -> SecureStorage:
    """Get a SecureStorage instance (convenience factory function)."""
    return SecureStorage(storage_dir)


__all__ = ["SecureStorage", "StorageError", "get_storage"]
