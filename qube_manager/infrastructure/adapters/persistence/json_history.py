"""JSON file History store.

The whole store is one JSON document, rewritten atomically on every change
(write to a temp file in the same directory, fsync, rename over the old
file). The document is loaded once at construction; reads are answered from
memory.

File format::

    {
      "actions": {
        "upgrade:v1.5.0": {"status": "success", "recorded_at": 1700000000},
        "upgrade:v1.6.0": {"status": "failure", "recorded_at": 1700000100,
                           "error": "hook exited with status 2"}
      }
    }

A bare JSON list of keys (the older format) is read as SUCCESS records.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path

import structlog

from qube_manager.application.ports.history import HistoryRecord, HistoryStatus
from qube_manager.domain.errors.history import HistoryError, HistoryWriteError
from qube_manager.infrastructure.adapters.durable_files import atomic_write

logger = structlog.get_logger(__name__)

HISTORY_FILENAME = "history.json"


class JsonFileHistory:
    """HistoryProtocol implementation backed by one JSON file.

    Attributes:
        path: Location of the history document.
    """

    def __init__(self, path: Path) -> None:
        """Load the history document.

        Args:
            path: History file; it need not exist yet.

        Raises:
            HistoryError: If the file exists but cannot be read or parsed.
        """
        self.path = path
        self._records: dict[str, HistoryRecord] = self._load()
        self._write_lock = asyncio.Lock()

    def _load(self) -> dict[str, HistoryRecord]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            raise HistoryError(f"cannot read history file {self.path}: {exc}") from exc

        if isinstance(document, list):
            return {
                str(key): HistoryRecord(
                    action_key=str(key), status=HistoryStatus.SUCCESS, recorded_at=0
                )
                for key in document
            }
        if not isinstance(document, dict):
            raise HistoryError(f"unexpected history document in {self.path}")

        records: dict[str, HistoryRecord] = {}
        for key, entry in document.get("actions", {}).items():
            try:
                records[key] = HistoryRecord(
                    action_key=key,
                    status=HistoryStatus(entry["status"]),
                    recorded_at=int(entry.get("recorded_at", 0)),
                    error=entry.get("error"),
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise HistoryError(
                    f"invalid history entry {key!r} in {self.path}: {exc}"
                ) from exc
        logger.debug("history_loaded", path=str(self.path), actions=len(records))
        return records

    @staticmethod
    def _render(records: dict[str, HistoryRecord]) -> str:
        actions: dict[str, dict[str, object]] = {}
        for key, record in sorted(records.items()):
            entry: dict[str, object] = {
                "status": record.status.value,
                "recorded_at": record.recorded_at,
            }
            if record.error:
                entry["error"] = record.error
            actions[key] = entry
        return json.dumps({"actions": actions}, indent=2) + "\n"

    async def _persist(self, action_key: str, records: dict[str, HistoryRecord]) -> None:
        try:
            await asyncio.to_thread(atomic_write, self.path, self._render(records))
        except OSError as exc:
            raise HistoryWriteError(action_key, str(exc)) from exc

    def has(self, action_key: str) -> bool:
        return action_key in self._records

    def get(self, action_key: str) -> HistoryRecord | None:
        return self._records.get(action_key)

    def keys(self) -> frozenset[str]:
        return frozenset(self._records)

    async def add(
        self,
        action_key: str,
        status: HistoryStatus,
        error: str | None = None,
    ) -> HistoryRecord:
        record = HistoryRecord(
            action_key=action_key,
            status=status,
            recorded_at=int(time.time()),
            error=error,
        )
        async with self._write_lock:
            updated = dict(self._records)
            updated[action_key] = record
            await self._persist(action_key, updated)
            self._records = updated
        logger.info("history_recorded", action_key=action_key, status=status.value)
        return record

    async def remove(self, action_key: str) -> None:
        async with self._write_lock:
            if action_key not in self._records:
                return
            updated = dict(self._records)
            del updated[action_key]
            await self._persist(action_key, updated)
            self._records = updated
        logger.info("history_removed", action_key=action_key)
