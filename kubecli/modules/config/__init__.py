"""
Config Module - Black Box Interface

Purpose: Client configuration management
Interface: get_config(), ConfigModule.get()/set()/get_all()
Hidden: Environment parsing, executable discovery, validation logic

Can be replaced with different config systems (files, secret stores).
"""

import os
import shutil
from typing import Any, Dict, Optional

# Configuration Contract: Required and Optional Keys

REQUIRED_CONFIG_KEYS = {
    "executable": "Path to the kubectl-compatible executable",
    "kubeconfig_path": "Path to the kubeconfig file passed via --kubeconfig",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
}

OPTIONAL_CONFIG_KEYS = {
    "dry_run": {
        "description": "Apply manifests with --dry-run=client by default",
        "default": False,
    },
}

DEFAULT_KUBECONFIG = os.path.join("~", ".kube", "config")


def _default_executable() -> str:
    return shutil.which("kubectl") or "kubectl"


def _default_kubeconfig(env_value: Optional[str]) -> str:
    # KUBECONFIG may hold a path list; --kubeconfig takes one file
    if env_value:
        first = env_value.split(os.pathsep)[0]
        if first:
            return os.path.expanduser(first)
    return os.path.expanduser(DEFAULT_KUBECONFIG)


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing
        """
        missing_keys = [
            key for key in REQUIRED_CONFIG_KEYS if not self._config.get(key)
        ]

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables."
            )

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        return {
            "executable": os.getenv("KUBECLI_KUBECTL") or _default_executable(),
            "kubeconfig_path": _default_kubeconfig(os.getenv("KUBECONFIG")),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "dry_run": os.getenv("KUBECLI_DRY_RUN", "false").lower() == "true",
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


__all__ = ["ConfigModule", "get_config", "reset_config"]
