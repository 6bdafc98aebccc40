"""
Configuration management for vtree.

Handles loading and saving user configuration from:
- XDG config directory: ~/.config/vtree/config.json
- Fallback: ~/.vtree-config/config.json
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ShellConfig:
    """Interactive session settings."""
    history: bool = True
    prompt_style: str = "ansicyan bold"
    color: bool = True


@dataclass
class StorageConfig:
    """Where the .vtree directory lives."""
    base_dir: Optional[str] = None


@dataclass
class CLIConfig:
    """CLI default options."""
    verbose: bool = False


@dataclass
class VTreeConfig:
    """Main vtree configuration."""
    shell: ShellConfig = field(default_factory=ShellConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "shell": asdict(self.shell),
            "storage": asdict(self.storage),
            "cli": asdict(self.cli),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VTreeConfig':
        """Create from dictionary."""
        return cls(
            shell=ShellConfig(**data.get("shell", {})),
            storage=StorageConfig(**data.get("storage", {})),
            cli=CLIConfig(**data.get("cli", {})),
        )


def get_config_path() -> Path:
    """
    Get configuration file path.

    1. ~/.config/vtree/config.json when ~/.config exists
    2. Fallback: ~/.vtree-config/config.json

    Returns:
        Path to config file
    """
    xdg_config_home = Path.home() / ".config"
    if xdg_config_home.exists():
        config_dir = xdg_config_home / "vtree"
    else:
        config_dir = Path.home() / ".vtree-config"

    return config_dir / "config.json"


def load_config() -> VTreeConfig:
    """
    Load configuration from file.

    Returns:
        VTreeConfig instance with loaded values or defaults
    """
    config_path = get_config_path()

    if not config_path.exists():
        return VTreeConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        return VTreeConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}. Using defaults.")
        return VTreeConfig()


def save_config(config: VTreeConfig) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save

    Returns:
        Path the configuration was written to
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.debug(f"Configuration saved to {config_path}")
    return config_path


def update_config(
    shell_history: Optional[bool] = None,
    shell_prompt_style: Optional[str] = None,
    shell_color: Optional[bool] = None,
    storage_base_dir: Optional[str] = None,
    cli_verbose: Optional[bool] = None,
) -> VTreeConfig:
    """
    Update configuration.

    Only updates provided values, leaving others unchanged.
    """
    config = load_config()

    if shell_history is not None:
        config.shell.history = shell_history
    if shell_prompt_style is not None:
        config.shell.prompt_style = shell_prompt_style
    if shell_color is not None:
        config.shell.color = shell_color

    if storage_base_dir is not None:
        config.storage.base_dir = storage_base_dir

    if cli_verbose is not None:
        config.cli.verbose = cli_verbose

    save_config(config)
    return config
