"""Unit tests for JsonlEventSource."""

import asyncio
import json
from pathlib import Path

import pytest

from qube_manager.application.ports.broadcast_source import BroadcastSourceProtocol
from qube_manager.infrastructure.adapters.broadcast.jsonl_source import (
    STDIN_SOURCE,
    JsonlEventSource,
)


def _line(pubkey: str, created_at: int) -> str:
    return json.dumps(
        {
            "id": f"id-{pubkey}-{created_at}",
            "pubkey": pubkey,
            "created_at": created_at,
            "kind": 33321,
            "tags": [["d", "hyperqube"], ["version", "v1.0.0"]],
            "content": "",
            "sig": "00",
        }
    )


async def _collect(source: JsonlEventSource) -> list:
    return [event async for event in source.events()]


class TestJsonlEventSource:
    def test_name(self) -> None:
        assert JsonlEventSource(STDIN_SOURCE).name == "stdin"
        assert JsonlEventSource("/tmp/events.jsonl").name == "/tmp/events.jsonl"
        assert isinstance(JsonlEventSource("x"), BroadcastSourceProtocol)

    @pytest.mark.asyncio
    async def test_reads_file_to_end(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        path.write_text(_line("s1", 1) + "\n" + _line("s2", 2))

        events = await _collect(JsonlEventSource(str(path), follow=False))

        assert [(e.signer_identity, e.observed_at) for e in events] == [("s1", 1), ("s2", 2)]
        assert events[0].tag_value("d") == "hyperqube"
        assert events[0].event_id == "id-s1-1"

    @pytest.mark.asyncio
    async def test_malformed_lines_are_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        path.write_text(
            "\n".join(
                [
                    "not json",
                    json.dumps({"pubkey": "s1", "kind": 33321}),
                    "",
                    _line("s2", 5),
                ]
            )
            + "\n"
        )

        events = await _collect(JsonlEventSource(str(path), follow=False))

        assert [e.signer_identity for e in events] == ["s2"]

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await _collect(JsonlEventSource(str(tmp_path / "nope.jsonl"), follow=False))

    @pytest.mark.asyncio
    async def test_follow_picks_up_appended_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        path.write_text(_line("s1", 1) + "\n")
        source = JsonlEventSource(str(path), follow=True, poll_interval=0.01)
        stream = source.events()

        first = await asyncio.wait_for(stream.__anext__(), timeout=2)
        pending = asyncio.ensure_future(stream.__anext__())
        with path.open("a") as handle:
            handle.write(_line("s2", 2))
            handle.flush()
            await asyncio.sleep(0.05)
            handle.write("\n")
        second = await asyncio.wait_for(pending, timeout=2)
        await stream.aclose()

        assert first.signer_identity == "s1"
        assert second.signer_identity == "s2"
