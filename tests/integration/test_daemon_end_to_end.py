"""End-to-end: config.yaml -> NDJSON source -> quorum -> History and outbox.

Runs the assembled daemon (real adapters, log-only executor) against files in
a temporary config directory.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path

import pytest
import yaml

from qube_manager.application.ports.history import HistoryStatus
from qube_manager.bootstrap.daemon import build_daemon
from qube_manager.cli.messages import build_signal_event
from qube_manager.config.config_file import load_config
from qube_manager.infrastructure.adapters.persistence.json_history import JsonFileHistory

pytestmark = pytest.mark.integration

HASH = "ef" * 32
SIGNER_A = "a1" * 32
SIGNER_B = "b2" * 32
SIGNER_C = "c3" * 32
UNTRUSTED = "d4" * 32


def _write_events(path: Path, signers: list[str], version: str, created_at: int) -> None:
    with path.open("a", encoding="utf-8") as handle:
        for signer in signers:
            event = build_signal_event(
                signer=signer,
                action="upgrade",
                version=version,
                binary_hash=HASH,
                network="hqz",
                created_at=created_at,
            )
            handle.write(event.model_dump_json(exclude_none=True) + "\n")


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    (tmp_path / "config.yaml").write_text(
        yaml.safe_dump(
            {
                "sources": ["events.jsonl"],
                "tail_sources": False,
                "follows": [SIGNER_A, SIGNER_B, SIGNER_C],
                "quorum": 2,
                "network": "hqz",
                "node_id": "node-e2e",
                "check_interval_seconds": 0.05,
                "journal": True,
                "outbox": "acks.jsonl",
            }
        )
    )
    return tmp_path


async def _run_until(config_dir: Path, predicate: Callable[[], bool]) -> None:
    daemon = build_daemon(load_config(config_dir))
    run = asyncio.create_task(daemon.run())

    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.02)

    try:
        await asyncio.wait_for(_poll(), timeout=5)
    finally:
        daemon.stop()
        await asyncio.wait_for(run, timeout=5)


class TestDaemonEndToEnd:
    @pytest.mark.asyncio
    async def test_quorum_executes_once_and_acknowledges(self, config_dir: Path) -> None:
        events = config_dir / "events.jsonl"
        _write_events(events, [SIGNER_A, SIGNER_B, UNTRUSTED], "v1.5.0", 100)
        outbox = config_dir / "acks.jsonl"

        await _run_until(config_dir, outbox.exists)

        history = JsonFileHistory(config_dir / "history.json")
        assert history.get("upgrade:v1.5.0").status is HistoryStatus.SUCCESS

        (ack_line,) = outbox.read_text().splitlines()
        ack = json.loads(ack_line)
        assert ack["kind"] == 3333
        assert ["status", "success"] in ack["tags"]
        assert ["p", SIGNER_A] in ack["tags"]

        journaled = (config_dir / "signals.jsonl").read_text().splitlines()
        assert {json.loads(line)["signer"] for line in journaled} == {SIGNER_A, SIGNER_B}

    @pytest.mark.asyncio
    async def test_restart_never_repeats_an_action(self, config_dir: Path) -> None:
        events = config_dir / "events.jsonl"
        _write_events(events, [SIGNER_A, SIGNER_B], "v1.5.0", 100)
        outbox = config_dir / "acks.jsonl"
        await _run_until(config_dir, outbox.exists)

        _write_events(events, [SIGNER_C], "v1.5.0", 200)
        _write_events(events, [SIGNER_A, SIGNER_B], "v1.6.0", 300)

        await _run_until(config_dir, lambda: len(outbox.read_text().splitlines()) >= 2)

        acks = [json.loads(line) for line in outbox.read_text().splitlines()]
        versions = [dict((t[0], t[1]) for t in ack["tags"])["version"] for ack in acks]
        assert versions == ["v1.5.0", "v1.6.0"]
