"""Unit tests for JsonlSignalJournal."""

from pathlib import Path

import pytest

from qube_manager.application.ports.signal_journal import SignalJournalProtocol
from qube_manager.infrastructure.adapters.persistence.signal_journal import (
    JOURNAL_FILENAME,
    JsonlSignalJournal,
)


@pytest.fixture
def journal(tmp_path: Path) -> JsonlSignalJournal:
    return JsonlSignalJournal(tmp_path / JOURNAL_FILENAME)


class TestJsonlSignalJournal:
    def test_satisfies_protocol(self, journal) -> None:
        assert isinstance(journal, SignalJournalProtocol)

    def test_replay_without_file(self, journal) -> None:
        assert journal.replay() == []

    @pytest.mark.asyncio
    async def test_replay_returns_signals_in_append_order(self, journal, make_signal) -> None:
        upgrade = make_signal("s1", 100, version="v1.0.0")
        reboot = make_signal("s2", 200, version="v2.0.0", genesis="https://g/x", deadline=500)

        await journal.append(upgrade)
        await journal.append(reboot)

        assert journal.replay() == [upgrade, reboot]
        assert journal.replay()[1].action_key == "reboot:v2.0.0:https://g/x"

    @pytest.mark.asyncio
    async def test_torn_and_invalid_lines_are_skipped(self, journal, make_signal) -> None:
        await journal.append(make_signal("s1", 100))
        with journal.path.open("a") as handle:
            handle.write('{"signer": "s2", "observed_at": 1, "action": "explode", '
                         '"version": "v1", "hash": "aa", "network": "hqz"}\n')
            handle.write('{"signer": "s3", "observ')

        replayed = journal.replay()

        assert [s.signer_identity for s in replayed] == ["s1"]

    @pytest.mark.asyncio
    async def test_compact_replaces_contents_atomically(self, journal, make_signal) -> None:
        kept = make_signal("s1", 300, version="v3.0.0")
        for observed_at in (100, 200):
            await journal.append(make_signal("s1", observed_at))
        with journal.path.open("a") as handle:
            handle.write('{"signer": "s3", "observ')

        await journal.compact([kept])

        assert journal.replay() == [kept]
        assert len(journal.path.read_text().splitlines()) == 1
        assert sorted(p.name for p in journal.path.parent.iterdir()) == [JOURNAL_FILENAME]

    @pytest.mark.asyncio
    async def test_append_after_compact(self, journal, make_signal) -> None:
        first = make_signal("s1", 100)
        second = make_signal("s2", 200)
        await journal.compact([first])

        await journal.append(second)

        assert journal.replay() == [first, second]
