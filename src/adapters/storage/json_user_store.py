"""JSON file user store for local development."""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from src.domain.entities.user import UserRecord
from src.domain.exceptions import StorageError, UserNotFoundError
from src.domain.ports.storage_port import UserStorePort

logger = structlog.get_logger()


class JSONUserStore(UserStorePort):
    """User store backed by a single local JSON file."""

    def __init__(self, file_path: str = "data/users.json"):
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        # Whole-file read-modify-write; one writer at a time
        self._lock = asyncio.Lock()
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Create the JSON file if it doesn't exist."""
        if not self.file_path.exists():
            self._write_data({"users": {}})
            logger.info("created_json_user_store", path=str(self.file_path))

    def _read_data(self) -> dict[str, Any]:
        """
        Read all data from JSON file.

        Raises:
            StorageError: If the file exists but is not a readable store.
        """
        try:
            with open(self.file_path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (ValueError, OSError) as e:
            logger.error("unreadable_json_user_store", path=str(self.file_path), error=str(e))
            raise StorageError(f"cannot read {self.file_path.name}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("users", {}), dict):
            logger.error("invalid_json_user_store", path=str(self.file_path))
            raise StorageError(f"{self.file_path.name} is not a user store")
        return data

    def _write_data(self, data: dict[str, Any]) -> None:
        """Write all data to a temp file, then swap it in place of the store."""
        fd, tmp_path = tempfile.mkstemp(
            dir=self.file_path.parent, prefix=f".{self.file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2, default=str)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.file_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    async def get_user(self, user_id: str) -> UserRecord:
        """Retrieve a user record from the JSON file."""
        users = self._read_data().get("users", {})
        if user_id not in users:
            raise UserNotFoundError(user_id)
        return UserRecord.from_dict(users[user_id])

    async def save_user(self, record: UserRecord) -> None:
        """Write a user record to the JSON file."""
        async with self._lock:
            data = self._read_data()
            data.setdefault("users", {})[record.user_id] = record.to_dict()
            self._write_data(data)

        logger.debug(
            "saved_user_to_json",
            user_id=record.user_id,
            watchlist=len(record.watchlist),
            portfolio=len(record.portfolio),
        )

    async def create_user(self, user_id: str) -> UserRecord:
        """Create an empty user record if none exists."""
        async with self._lock:
            data = self._read_data()
            users = data.setdefault("users", {})
            if user_id in users:
                return UserRecord.from_dict(users[user_id])

            record = UserRecord(user_id=user_id)
            users[user_id] = record.to_dict()
            self._write_data(data)

        logger.info("created_user", user_id=user_id)
        return record
