"""Unit tests for RawEvent and Signal."""

import pytest

from qube_manager.domain.errors.signal import InvalidSignalError
from qube_manager.domain.models.action import (
    ActionType,
    CandidateAction,
    RebootDetails,
    SemanticVersion,
)
from qube_manager.domain.models.signal import RawEvent, Signal


class TestRawEventTags:
    """Tests for tag lookup."""

    def test_first_tag_wins(self) -> None:
        event = RawEvent(
            signer_identity="s1",
            observed_at=1,
            kind=33321,
            tags=(("version", "v1.0.0"), ("version", "v2.0.0")),
        )

        assert event.tag_value("version") == "v1.0.0"

    def test_missing_or_valueless_tag_is_empty(self) -> None:
        event = RawEvent(signer_identity="s1", observed_at=1, kind=33321, tags=(("hash",),))

        assert event.tag_value("hash") == ""
        assert event.tag_value("network") == ""
        assert event.has_tag("hash")


class TestSignalInvariants:
    """Tests for Signal construction."""

    def test_upgrade_signal_derives_action_key(self, make_signal) -> None:
        signal = make_signal(version="v1.5.0")

        assert signal.action_key == "upgrade:v1.5.0"
        assert signal.genesis_reference is None
        assert signal.deadline is None

    def test_reboot_signal_carries_genesis_and_deadline(self, make_signal) -> None:
        signal = make_signal(
            version="v2.0.0", genesis="https://example.org/g.json", deadline=1700000000
        )

        assert signal.action_type is ActionType.REBOOT
        assert signal.action_key == "reboot:v2.0.0:https://example.org/g.json"
        assert signal.deadline == 1700000000

    def test_reboot_without_details_is_rejected(self) -> None:
        with pytest.raises(InvalidSignalError) as exc_info:
            Signal(
                signer_identity="s1",
                observed_at=1,
                action_type=ActionType.REBOOT,
                version=SemanticVersion.parse("v1.0.0"),
                binary_hash="ab",
                network_scope="hqz",
            )

        assert exc_info.value.field == "reboot"

    def test_upgrade_with_reboot_details_is_rejected(self) -> None:
        with pytest.raises(InvalidSignalError):
            Signal(
                signer_identity="s1",
                observed_at=1,
                action_type=ActionType.UPGRADE,
                version=SemanticVersion.parse("v1.0.0"),
                binary_hash="ab",
                network_scope="hqz",
                reboot=RebootDetails(genesis_reference="https://example.org"),
            )

    @pytest.mark.parametrize("field", ["signer_identity", "binary_hash", "network_scope"])
    def test_empty_required_field_is_rejected(self, field: str) -> None:
        values = {
            "signer_identity": "s1",
            "binary_hash": "ab",
            "network_scope": "hqz",
        }
        values[field] = ""

        with pytest.raises(InvalidSignalError) as exc_info:
            Signal(
                observed_at=1,
                action_type=ActionType.UPGRADE,
                version=SemanticVersion.parse("v1.0.0"),
                **values,
            )

        assert exc_info.value.field == field


class TestCandidateAction:
    """Tests for CandidateAction.from_signal."""

    def test_copies_first_signal_details(self, make_signal) -> None:
        signal = make_signal("origin", 42, version="v3.0.0", genesis="https://g")

        candidate = CandidateAction.from_signal(signal)

        assert candidate.key == signal.action_key
        assert candidate.origin_signer_identity == "origin"
        assert candidate.first_seen_at == 42
        assert candidate.genesis_reference == "https://g"
