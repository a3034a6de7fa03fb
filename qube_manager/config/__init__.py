"""Configuration: config.yaml loading and the validated QuorumConfig."""

from qube_manager.config.config_file import (
    CONFIG_FILENAME,
    ConfigFile,
    ensure_config_file,
    generate_node_id,
    load_config,
)
from qube_manager.config.quorum_config import (
    DEFAULT_CONFIG_DIR,
    ExecutorConfig,
    QuorumConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_DIR",
    "ConfigFile",
    "ExecutorConfig",
    "QuorumConfig",
    "ensure_config_file",
    "generate_node_id",
    "load_config",
]
