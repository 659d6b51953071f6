"""
JSON File Storage Implementation

DESIGN DECISION: Local JSON files are the default storage backend because:
1. Users can read their own data with any text editor
2. No database setup required
3. pydantic already knows how to round-trip every model

Layout:
    <data_dir>/<account_id>.json           one file per account (id percent-encoded)
    <backup_dir>/<account_id>_<stamp>.json  timestamped backups
    <data_dir>/audit.jsonl                  append-only audit log

Writes go to a temporary file first and are moved into place with
os.replace(), so a crash never leaves a half-written account behind.
Transient OS errors are retried with tenacity.
"""

import json
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import structlog
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocketledger.config import StorageSettings, get_settings
from pocketledger.models.account import Account
from pocketledger.models.audit import AuditEvent
from pocketledger.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    NotFoundError,
    StorageError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


def account_file_name(account_id: str) -> str:
    """
    File name for an account.

    The id is percent-encoded, so distinct ids never share a file and no
    id can reach outside the data directory.
    """
    account_id = account_id.strip()
    if not account_id:
        raise StorageError("Account id cannot be empty")
    return f"{quote(account_id, safe='')}.json"


class JsonFileAccountStorage(AccountStorageInterface):
    """
    Stores each account as one pretty-printed JSON document.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage
        self._data_dir = Path(self._settings.data_dir)
        self._backup_dir = Path(self._settings.backup_dir)

    def _path(self, account_id: str) -> Path:
        return self._data_dir / account_file_name(account_id)

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._settings.write_retries),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def _write_atomic(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        finally:
            tmp.unlink(missing_ok=True)

    def load(self, account_id: str) -> Account:
        path = self._path(account_id)
        if not path.exists():
            raise NotFoundError(f"No stored account for '{account_id}'")

        try:
            account = Account.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise StorageError(f"Corrupt account file {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}") from e

        if account.account_id != account_id.strip():
            raise StorageError(
                f"{path} holds account '{account.account_id}', not '{account_id}'"
            )
        return account

    def save(self, account: Account) -> bool:
        path = self._path(account.account_id)
        payload = account.model_dump_json(indent=2)

        try:
            for attempt in self._retrying():
                with attempt:
                    self._write_atomic(path, payload)
        except OSError as e:
            raise StorageWriteError(f"Failed to save account to {path}: {e}") from e

        logger.debug("account_saved", account_id=account.account_id, path=str(path))
        return True

    def exists(self, account_id: str) -> bool:
        return self._path(account_id).exists()

    def delete(self, account_id: str) -> bool:
        path = self._path(account_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def backup(self, account_id: str) -> str:
        source = self._path(account_id)
        if not source.exists():
            raise NotFoundError(f"No stored account for '{account_id}'")

        stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        target = self._backup_dir / f"{source.stem}_{stamp}.json"

        try:
            for attempt in self._retrying():
                with attempt:
                    self._backup_dir.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(source, target)
        except OSError as e:
            raise StorageWriteError(f"Failed to create backup {target}: {e}") from e

        logger.info("backup_created", account_id=account_id, path=str(target))
        return str(target)


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else get_settings().storage.audit_path

    def append_event(self, event: AuditEvent) -> bool:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as f:
            f.write(event.to_json_line() + "\n")
        return True

    def get_recent_events(
        self,
        limit: int = 100,
        account_id: str | None = None,
    ) -> list[AuditEvent]:
        if not self._path.exists():
            return []

        events = []
        with open(self._path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                event = AuditEvent.model_validate(json.loads(line))
                if account_id is None or event.account_id == account_id:
                    events.append(event)

        events.reverse()
        return events[:limit]
