"""
Pytest configuration and shared fixtures for qube-manager tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from collections.abc import Callable, Iterator

import pytest

from qube_manager.domain.models.action import ActionType, RebootDetails, SemanticVersion
from qube_manager.domain.models.signal import SIGNAL_KIND, RawEvent, Signal


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from qube_manager import __version__

    return __version__


@pytest.fixture(autouse=True)
def _reset_singletons() -> Iterator[None]:
    """Keep bootstrap singletons from leaking between tests."""
    from qube_manager.bootstrap.coordinator import reset_quorum_coordinator
    from qube_manager.bootstrap.metrics import reset_metrics
    from qube_manager.infrastructure.monitoring.metrics import reset_quorum_metrics

    yield
    reset_quorum_coordinator()
    reset_metrics()
    reset_quorum_metrics()


def build_raw_event(
    signer: str = "npub-signer-1",
    observed_at: int = 100,
    *,
    version: str | None = "v1.0.0",
    action: str | None = "upgrade",
    network: str | None = "hqz",
    binary_hash: str | None = "ab" * 32,
    topic: str | None = "hyperqube",
    genesis: str | None = None,
    required_by: str | None = None,
    kind: int = SIGNAL_KIND,
) -> RawEvent:
    """Build a raw signal event; pass None to leave a tag out."""
    tags: list[tuple[str, ...]] = []
    for name, value in (
        ("d", topic),
        ("version", version),
        ("hash", binary_hash),
        ("network", network),
        ("action", action),
        ("genesis_url", genesis),
        ("required_by", required_by),
    ):
        if value is not None:
            tags.append((name, value))
    return RawEvent(
        signer_identity=signer,
        observed_at=observed_at,
        kind=kind,
        tags=tuple(tags),
    )


@pytest.fixture
def make_event() -> Callable[..., RawEvent]:
    """Factory fixture for raw signal events."""
    return build_raw_event


def build_signal(
    signer: str = "npub-signer-1",
    observed_at: int = 100,
    *,
    version: str = "v1.0.0",
    network: str = "hqz",
    binary_hash: str = "ab" * 32,
    genesis: str | None = None,
    deadline: int | None = None,
) -> Signal:
    """Build a validated Signal; a genesis makes it a reboot."""
    reboot = (
        RebootDetails(genesis_reference=genesis, deadline=deadline) if genesis else None
    )
    return Signal(
        signer_identity=signer,
        observed_at=observed_at,
        action_type=ActionType.REBOOT if genesis else ActionType.UPGRADE,
        version=SemanticVersion.parse(version),
        binary_hash=binary_hash,
        network_scope=network,
        reboot=reboot,
    )


@pytest.fixture
def make_signal() -> Callable[..., Signal]:
    """Factory fixture for validated signals."""
    return build_signal
