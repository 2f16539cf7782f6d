"""Configuration management for Strata.

This module provides a clean interface for reading and writing
both repository-local and global configuration files.
"""

import getpass
import os
import configparser
from pathlib import Path
from typing import Optional, Dict, Tuple


class Config:
    """
    Manages Strata configuration files.

    Configuration is stored in INI format, similar to Git:
    - Global config: ~/.strataconfig
    - Repository config: .strata/config

    Repository config takes precedence over global config.
    Environment variables take highest precedence.
    """

    GLOBAL_CONFIG_PATH = Path.home() / '.strataconfig'

    def __init__(self, repo_config_path: Optional[Path] = None,
                 global_config_path: Optional[Path] = None):
        """
        Initialize Config manager.

        Args:
            repo_config_path: Path to repository config file, if in a repo
            global_config_path: Override for the global config location
        """
        self.repo_config_path = Path(repo_config_path) if repo_config_path else None
        self.global_config_path = Path(global_config_path or self.GLOBAL_CONFIG_PATH)
        self._global_config = None
        self._repo_config = None

    @property
    def global_config(self) -> configparser.ConfigParser:
        """Load and return global configuration."""
        if self._global_config is None:
            self._global_config = configparser.ConfigParser()
            if self.global_config_path.exists():
                self._global_config.read(self.global_config_path)
        return self._global_config

    @property
    def repo_config(self) -> Optional[configparser.ConfigParser]:
        """Load and return repository configuration."""
        if self._repo_config is None and self.repo_config_path:
            self._repo_config = configparser.ConfigParser()
            if self.repo_config_path.exists():
                self._repo_config.read(self.repo_config_path)
        return self._repo_config

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value.

        Priority order (highest to lowest):
        1. Environment variables (STRATA_<SECTION>_<KEY>)
        2. Repository config
        3. Global config
        4. Fallback value
        """
        env_value = os.environ.get(f"STRATA_{section.upper()}_{key.upper()}")
        if env_value is not None:
            return env_value

        if self.repo_config and self.repo_config.has_option(section, key):
            return self.repo_config.get(section, key)

        if self.global_config.has_option(section, key):
            return self.global_config.get(section, key)

        return fallback

    def set(self, section: str, key: str, value: str, global_config: bool = False) -> None:
        """
        Set a configuration value.

        Args:
            section: Config section
            key: Config key
            value: Value to set
            global_config: If True, write to global config; otherwise repo config
        """
        if global_config:
            config = self.global_config
            config_path = self.global_config_path
        else:
            if not self.repo_config_path:
                raise ValueError("No repository config path available")
            config = self.repo_config
            config_path = self.repo_config_path

        if not config.has_section(section):
            config.add_section(section)

        config.set(section, key, value)

        with open(config_path, 'w') as f:
            config.write(f)

    def unset(self, section: str, key: str, global_config: bool = False) -> bool:
        """
        Remove a configuration value.

        Returns:
            True if value was removed, False if it didn't exist
        """
        if global_config:
            config = self.global_config
            config_path = self.global_config_path
        else:
            if not self.repo_config:
                return False
            config = self.repo_config
            config_path = self.repo_config_path

        if not config.has_option(section, key):
            return False

        config.remove_option(section, key)

        if not config.options(section):
            config.remove_section(section)

        with open(config_path, 'w') as f:
            config.write(f)

        return True

    def list_all(self) -> Dict[str, Dict[str, str]]:
        """
        List all configuration values, repository values overriding global ones.

        Returns:
            Dict of sections to key-value dicts
        """
        result: Dict[str, Dict[str, str]] = {}
        layers = [self.global_config]
        if self.repo_config:
            layers.append(self.repo_config)

        for config in layers:
            for section in config.sections():
                result.setdefault(section, {}).update(config.items(section))

        return result

    def get_user_identity(self) -> Tuple[Optional[str], Optional[str]]:
        """
        Get user name and email for commits.

        Returns:
            Tuple of (name, email), either may be None
        """
        return self.get('user', 'name'), self.get('user', 'email')


def format_identity(config: Config) -> str:
    """
    Author string for new commits.

    Uses user.name and user.email when configured, falling back to the
    login name of the current user.
    """
    name, email = config.get_user_identity()
    if not name:
        try:
            name = getpass.getuser()
        except (KeyError, OSError):
            name = 'unknown'
    if email:
        return f"{name} <{email}>"
    return name

