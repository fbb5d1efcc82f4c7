"""Configuration loading and management."""

import logging
import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from .types import ConfigurationError, PruneConfig, PrunePolicy

logger = logging.getLogger(__name__)

ENV_PREFIX = "PRUNE_"


def parse_bool(value: str) -> bool:
    """Parse an environment flag ("1", "true", "yes", "on" are true)."""
    return value.strip().lower() in ("1", "true", "yes", "on")


# env suffix -> (policy field, parser)
POLICY_ENV: dict[str, tuple[str, Callable[[str], Any]]] = {
    "MIN_MESSAGES": ("min_messages", int),
    "FULL_RETENTION_COUNT": ("full_retention_count", int),
    "COMPRESS_MIN_CHARS": ("compress_min_chars", int),
    "COMPRESSION_THRESHOLD": ("compression_threshold", float),
    "REMOVAL_THRESHOLD": ("removal_threshold", float),
    "HIGH_IMPORTANCE_THRESHOLD": ("high_importance_threshold", float),
    "TOKENS_PER_MESSAGE": ("tokens_per_message", int),
    "MAX_AGGRESSIVE_MESSAGES": ("max_aggressive_messages", int),
    "ENABLE_AGGRESSIVE_PRUNING": ("enable_aggressive_pruning", parse_bool),
    "PROTECT_ESSENTIAL_IN_AGGRESSIVE": ("protect_essential_in_aggressive", parse_bool),
}


class ConfigLoader:
    """Loads and merges configuration from YAML and environment."""

    @staticmethod
    def load_yaml(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {config_path}")
        logger.debug("Loaded config from %s", path)
        return data

    @staticmethod
    def load_from_env() -> dict[str, Any]:
        """Load configuration from environment variables."""
        config: dict[str, Any] = {}

        try:
            if max_tokens := os.environ.get(f"{ENV_PREFIX}MAX_TOKENS"):
                config["max_tokens"] = int(max_tokens)
            if ratio := os.environ.get(f"{ENV_PREFIX}CHARS_PER_TOKEN"):
                config["chars_per_token"] = float(ratio)

            policy_config = {}
            for suffix, (name, parse) in POLICY_ENV.items():
                if value := os.environ.get(f"{ENV_PREFIX}{suffix}"):
                    policy_config[name] = parse(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment override: {e}") from e

        if policy_config:
            config["policy"] = policy_config

        # Telemetry
        if ariadne_url := os.environ.get(f"{ENV_PREFIX}ARIADNE_URL"):
            config["ariadne_url"] = ariadne_url
        if telemetry := os.environ.get(f"{ENV_PREFIX}TELEMETRY_ENABLED"):
            config["telemetry_enabled"] = parse_bool(telemetry)

        return config

    @staticmethod
    def load(
        config_path: Optional[str] = None, merge_env: bool = True
    ) -> PruneConfig:
        """
        Load configuration from file and environment.

        Environment values override file values; policy keys are merged
        individually rather than replacing the whole policy section.

        Args:
            config_path: Path to YAML config file (optional)
            merge_env: Whether to merge environment variable overrides

        Returns:
            PruneConfig object

        Raises:
            FileNotFoundError: If config file specified but not found
            ConfigurationError: If configuration is invalid
        """
        config_dict: dict[str, Any] = {}

        if config_path:
            config_dict = ConfigLoader.load_yaml(config_path)

        if merge_env:
            env_config = ConfigLoader.load_from_env()
            policy_dict = {
                **(config_dict.get("policy") or {}),
                **env_config.pop("policy", {}),
            }
            config_dict = {**config_dict, **env_config}
            if policy_dict:
                config_dict["policy"] = policy_dict

        policy_dict = config_dict.pop("policy", None) or {}
        _reject_unknown(policy_dict, PrunePolicy, "policy")
        _reject_unknown(config_dict, PruneConfig, "config")

        config = PruneConfig(policy=PrunePolicy(**policy_dict), **config_dict)
        config.validate()

        return config


def _reject_unknown(values: dict[str, Any], cls: type, section: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown {section} keys: {', '.join(unknown)}")


def create_example_config(path: str) -> None:
    """Create an example configuration file."""
    example = asdict(PruneConfig())
    example.pop("ariadne_url")

    Path(path).parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(example, f, default_flow_style=False, sort_keys=False)

    logger.info("Example config created: %s", path)
