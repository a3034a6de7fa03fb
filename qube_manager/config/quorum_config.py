"""Runtime configuration of the quorum daemon.

QuorumConfig is the validated, immutable form every component is built
from. It is normally produced by ``load_config`` (config.yaml) and then
passed through ``with_environment`` so deployments can override single
values without editing the file.

Environment Variables:
- QUBE_FOLLOWS: Comma-separated trusted signers (npub or hex public keys)
- QUBE_QUORUM: Distinct signers needed to act (default: 3)
- QUBE_NETWORK: Network scope (default: hqz)
- QUBE_NODE_ID: Node identifier used in acknowledgements
- QUBE_SOURCES: Comma-separated event sources ("-" is stdin)
- QUBE_CHECK_INTERVAL: Seconds between evaluation cycles (default: 60)
- QUBE_FAILURE_POLICY: "suppress" or "retry" (default: suppress)
- QUBE_STATUS_PORT: Port for the status API (default: disabled)
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path

from qube_manager.application.services.quorum_coordinator import FailurePolicy
from qube_manager.config.signer_keys import normalize_follows

DEFAULT_CONFIG_DIR = Path("~/.qube-manager").expanduser()
DEFAULT_NETWORK = "hqz"
DEFAULT_QUORUM = 3
DEFAULT_CHECK_INTERVAL_SECONDS = 60.0
DEFAULT_EXECUTOR_TIMEOUT_SECONDS = 300.0
DEFAULT_OUTBOX = "acks.jsonl"


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable, or default if unset or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable, or default if unset or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_list_env(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.environ.get(key)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class ExecutorConfig:
    """Hook executor settings.

    Attributes:
        command: argv of the hook; empty means log-only execution.
        timeout_seconds: Time budget for one hook run.
        binary_path: Staged binary whose SHA-256 must match the signal.
    """

    command: tuple[str, ...] = ()
    timeout_seconds: float = DEFAULT_EXECUTOR_TIMEOUT_SECONDS
    binary_path: str | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"executor timeout_seconds must be positive, got {self.timeout_seconds}"
            )


@dataclass(frozen=True)
class QuorumConfig:
    """Validated daemon configuration.

    Attributes:
        follows: Trusted signers as hex public keys; empty trusts every
            author the sources deliver. load_config and with_environment
            decode npub entries.
        quorum: Distinct signers required for an action to be eligible.
        network: Network scope this node acts for.
        node_id: Identifier reported in acknowledgements.
        sources: Event source locations (file paths, "-" for stdin).
        tail_sources: Keep following file sources for appended events.
        check_interval_seconds: Evaluation cycle period.
        failure_policy: What to do with actions whose execution failed.
        journal: Persist accepted signals and replay them at startup.
        outbox: Acknowledgement outbox file (relative to config_dir); None
            logs acknowledgements instead.
        executor: Hook executor settings.
        status_host: Bind address of the status API.
        status_port: Port of the status API; None disables it.
        config_dir: Directory holding config.yaml and all state files.
    """

    follows: tuple[str, ...] = ()
    quorum: int = DEFAULT_QUORUM
    network: str = DEFAULT_NETWORK
    node_id: str = ""
    sources: tuple[str, ...] = ()
    tail_sources: bool = True
    check_interval_seconds: float = DEFAULT_CHECK_INTERVAL_SECONDS
    failure_policy: FailurePolicy = FailurePolicy.SUPPRESS
    journal: bool = False
    outbox: str | None = DEFAULT_OUTBOX
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    status_host: str = "127.0.0.1"
    status_port: int | None = None
    config_dir: Path = DEFAULT_CONFIG_DIR

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.quorum < 1:
            raise ValueError(f"quorum must be at least 1, got {self.quorum}")
        if not self.network:
            raise ValueError("network must not be empty")
        if self.check_interval_seconds <= 0:
            raise ValueError(
                "check_interval_seconds must be positive, "
                f"got {self.check_interval_seconds}"
            )
        if any(not signer for signer in self.follows):
            raise ValueError("follows must not contain empty identities")
        if self.status_port is not None and not 0 < self.status_port < 65536:
            raise ValueError(f"status_port out of range: {self.status_port}")

    @property
    def history_path(self) -> Path:
        return self.config_dir / "history.json"

    @property
    def journal_path(self) -> Path:
        return self.config_dir / "signals.jsonl"

    @property
    def outbox_path(self) -> Path | None:
        if self.outbox is None:
            return None
        return self.config_dir / Path(self.outbox).expanduser()

    @property
    def quorum_reachable(self) -> bool:
        """False when the trusted set is smaller than the quorum."""
        return not self.follows or len(set(self.follows)) >= self.quorum

    def with_environment(self) -> QuorumConfig:
        """Return a copy with QUBE_* environment overrides applied."""
        policy = os.environ.get("QUBE_FAILURE_POLICY")
        status_port = _get_int_env("QUBE_STATUS_PORT", 0)
        return dataclasses.replace(
            self,
            follows=normalize_follows(_get_list_env("QUBE_FOLLOWS", self.follows)),
            quorum=_get_int_env("QUBE_QUORUM", self.quorum),
            network=os.environ.get("QUBE_NETWORK", self.network),
            node_id=os.environ.get("QUBE_NODE_ID", self.node_id),
            sources=_get_list_env("QUBE_SOURCES", self.sources),
            check_interval_seconds=_get_float_env(
                "QUBE_CHECK_INTERVAL", self.check_interval_seconds
            ),
            failure_policy=FailurePolicy(policy) if policy else self.failure_policy,
            status_port=status_port or self.status_port,
        )

    @classmethod
    def from_environment(cls) -> QuorumConfig:
        """Create config from environment variables with defaults."""
        return cls().with_environment()
