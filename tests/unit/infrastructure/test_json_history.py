"""Unit tests for JsonFileHistory."""

import json
from pathlib import Path

import pytest

from qube_manager.application.ports.history import HistoryProtocol, HistoryStatus
from qube_manager.domain.errors.history import HistoryError, HistoryWriteError
from qube_manager.infrastructure.adapters.persistence.json_history import (
    HISTORY_FILENAME,
    JsonFileHistory,
)


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    return tmp_path / HISTORY_FILENAME


class TestJsonFileHistory:
    """Tests for the JSON file History store."""

    def test_satisfies_protocol(self, history_path: Path) -> None:
        assert isinstance(JsonFileHistory(history_path), HistoryProtocol)

    def test_missing_file_is_empty(self, history_path: Path) -> None:
        history = JsonFileHistory(history_path)

        assert history.keys() == frozenset()
        assert not history_path.exists()

    @pytest.mark.asyncio
    async def test_add_is_durable_across_instances(self, history_path: Path) -> None:
        history = JsonFileHistory(history_path)

        await history.add("upgrade:v1.0.0", HistoryStatus.EXECUTING)
        await history.add("upgrade:v1.0.0", HistoryStatus.FAILURE, error="exit 2")

        reloaded = JsonFileHistory(history_path)
        record = reloaded.get("upgrade:v1.0.0")
        assert record.status is HistoryStatus.FAILURE
        assert record.error == "exit 2"

    @pytest.mark.asyncio
    async def test_file_format(self, history_path: Path) -> None:
        history = JsonFileHistory(history_path)

        await history.add("upgrade:v1.0.0", HistoryStatus.SUCCESS)

        document = json.loads(history_path.read_text())
        assert document["actions"]["upgrade:v1.0.0"]["status"] == "success"
        assert "error" not in document["actions"]["upgrade:v1.0.0"]

    @pytest.mark.asyncio
    async def test_remove(self, history_path: Path) -> None:
        history = JsonFileHistory(history_path)
        await history.add("upgrade:v1.0.0", HistoryStatus.EXECUTING)

        await history.remove("upgrade:v1.0.0")
        await history.remove("upgrade:v9.0.0")

        assert not history.has("upgrade:v1.0.0")
        assert not JsonFileHistory(history_path).has("upgrade:v1.0.0")

    @pytest.mark.asyncio
    async def test_no_temp_files_left_behind(self, history_path: Path) -> None:
        history = JsonFileHistory(history_path)

        await history.add("upgrade:v1.0.0", HistoryStatus.SUCCESS)

        assert [p.name for p in history_path.parent.iterdir()] == [HISTORY_FILENAME]

    def test_legacy_key_list_reads_as_success(self, history_path: Path) -> None:
        history_path.write_text(json.dumps(["upgrade:v1.0.0", "reboot:v2:https://g"]))

        history = JsonFileHistory(history_path)

        assert history.get("upgrade:v1.0.0").status is HistoryStatus.SUCCESS
        assert history.has("reboot:v2:https://g")

    @pytest.mark.parametrize(
        "content",
        ["{not json", '"a string"', '{"actions": {"k": {"status": "bogus"}}}'],
    )
    def test_corrupt_file_raises(self, history_path: Path, content: str) -> None:
        history_path.write_text(content)

        with pytest.raises(HistoryError):
            JsonFileHistory(history_path)

    @pytest.mark.asyncio
    async def test_failed_write_leaves_memory_unchanged(self, tmp_path: Path) -> None:
        history = JsonFileHistory(tmp_path / "missing-dir" / HISTORY_FILENAME)

        with pytest.raises(HistoryWriteError):
            await history.add("upgrade:v1.0.0", HistoryStatus.EXECUTING)

        assert not history.has("upgrade:v1.0.0")
