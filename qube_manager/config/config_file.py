"""config.yaml loading.

The file lives in the config directory (default ``~/.qube-manager``). When
it does not exist a commented default is written and then loaded. A file
without ``network`` gets the default network, and one without ``node_id``
gets a freshly generated identifier; either change is saved back so the
node keeps the same identity across restarts.
"""

from __future__ import annotations

import secrets
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field

from qube_manager.application.services.quorum_coordinator import FailurePolicy
from qube_manager.config.quorum_config import (
    DEFAULT_CHECK_INTERVAL_SECONDS,
    DEFAULT_EXECUTOR_TIMEOUT_SECONDS,
    DEFAULT_NETWORK,
    DEFAULT_OUTBOX,
    DEFAULT_QUORUM,
    ExecutorConfig,
    QuorumConfig,
)
from qube_manager.config.signer_keys import normalize_follows
from qube_manager.domain.errors.configuration import ConfigurationError

logger = structlog.get_logger(__name__)

CONFIG_FILENAME = "config.yaml"

DEFAULT_CONFIG_TEMPLATE = f"""\
# qube-manager configuration

# NDJSON event sources; "-" reads standard input
sources:
  - events.jsonl
tail_sources: true

# Trusted signers
follows:
  - npub1sr47j9awvw2xa0m4w770dr2rl7ylzq4xt9k5rel3h4h58sc3mjysx6pj64
  - npub1ackp65pgrxp6r27jw82p68cv572r8yxgasnpaqnd2mzexr09gc3ss24gcw
  - npub1mwwt7lxz5cyd3kgl5xmru8e2af2ajkuxrjsulyl6edwplwj36e3qkjwwaa
  - npub1aels8qtlje0m8q5z89pquk2cqq37kxzwzshafnmeccvlat3jqrpslh7rph
  - npub1k52c552mgr75gzm8swar0y0nw4ctwwevlxtrx4ftvqypssafl3fsjgyt4v
  - npub17uv2z8hrm90fuznz27xaxxagy7ysx5p9xfhqenq0yf3lueqnj8rqm70h8s

quorum: {DEFAULT_QUORUM}
network: {DEFAULT_NETWORK}
node_id: ""

check_interval_seconds: {DEFAULT_CHECK_INTERVAL_SECONDS:g}
failure_policy: suppress
journal: false
outbox: {DEFAULT_OUTBOX}

executor:
  command: []
  timeout_seconds: {DEFAULT_EXECUTOR_TIMEOUT_SECONDS:g}
  binary_path: null

status_port: null
"""


class ExecutorSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    command: list[str] = Field(default_factory=list)
    timeout_seconds: float = Field(DEFAULT_EXECUTOR_TIMEOUT_SECONDS, gt=0)
    binary_path: str | None = None


class ConfigFile(BaseModel):
    """Schema of config.yaml. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    sources: list[str] = Field(default_factory=list)
    tail_sources: bool = True
    follows: list[str] = Field(default_factory=list)
    quorum: int = Field(DEFAULT_QUORUM, ge=1)
    network: str = ""
    node_id: str = ""
    check_interval_seconds: float = Field(DEFAULT_CHECK_INTERVAL_SECONDS, gt=0)
    failure_policy: FailurePolicy = FailurePolicy.SUPPRESS
    journal: bool = False
    outbox: str | None = DEFAULT_OUTBOX
    executor: ExecutorSection = Field(default_factory=ExecutorSection)
    status_host: str = "127.0.0.1"
    status_port: int | None = Field(None, gt=0, lt=65536)

    def to_config(self, config_dir: Path) -> QuorumConfig:
        return QuorumConfig(
            follows=normalize_follows(self.follows),
            quorum=self.quorum,
            network=self.network or DEFAULT_NETWORK,
            node_id=self.node_id,
            sources=tuple(self.sources),
            tail_sources=self.tail_sources,
            check_interval_seconds=self.check_interval_seconds,
            failure_policy=self.failure_policy,
            journal=self.journal,
            outbox=self.outbox,
            executor=ExecutorConfig(
                command=tuple(self.executor.command),
                timeout_seconds=self.executor.timeout_seconds,
                binary_path=self.executor.binary_path,
            ),
            status_host=self.status_host,
            status_port=self.status_port,
            config_dir=config_dir,
        )


def generate_node_id() -> str:
    """Random identifier shaped like ``node-xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx``."""
    raw = secrets.token_hex(16)
    return f"node-{raw[0:8]}-{raw[8:12]}-{raw[12:16]}-{raw[16:20]}-{raw[20:32]}"


def _read_document(path: Path) -> dict[str, Any]:
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"cannot read config: {exc}", source=str(path)) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML: {exc}", source=str(path)) from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError("config must be a mapping", source=str(path))
    return document


def _write_document(path: Path, document: dict[str, Any]) -> None:
    try:
        path.write_text(
            yaml.safe_dump(document, sort_keys=False, default_flow_style=False),
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("config_save_failed", path=str(path), error=str(exc))


def ensure_config_file(config_dir: Path) -> Path:
    """Create the config directory and a default config.yaml if missing."""
    path = config_dir / CONFIG_FILENAME
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        if not path.exists():
            path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
            logger.warning("default_config_created", path=str(path))
    except OSError as exc:
        raise ConfigurationError(
            f"cannot create config: {exc}", source=str(path)
        ) from exc
    return path


def load_config(config_dir: Path) -> QuorumConfig:
    """Load, complete and validate config.yaml.

    Args:
        config_dir: Directory holding config.yaml.

    Returns:
        The validated QuorumConfig.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid.
    """
    config_dir = config_dir.expanduser()
    path = ensure_config_file(config_dir)
    document = _read_document(path)

    updated = False
    if not document.get("network"):
        document["network"] = DEFAULT_NETWORK
        logger.warning("config_network_defaulted", network=DEFAULT_NETWORK)
        updated = True
    if not document.get("node_id"):
        document["node_id"] = generate_node_id()
        logger.warning("config_node_id_generated", node_id=document["node_id"])
        updated = True
    if updated:
        _write_document(path, document)

    try:
        config = ConfigFile.model_validate(document).to_config(config_dir)
    except ValueError as exc:
        raise ConfigurationError(str(exc), source=str(path)) from exc

    if not config.quorum_reachable:
        logger.warning(
            "quorum_unreachable",
            quorum=config.quorum,
            follows=len(set(config.follows)),
        )
    logger.info(
        "config_loaded",
        path=str(path),
        sources=len(config.sources),
        follows=len(config.follows),
        quorum=config.quorum,
        network=config.network,
        node_id=config.node_id,
    )
    return config
