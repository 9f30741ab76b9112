"""Configuration module for browser_updater.

- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files
- HostKeyVerifier: Manages SSH host key verification
- Settings: Environment variable configuration
"""

from browser_updater.config.host_keys import HostKeyVerifier
from browser_updater.config.main import Config, HostNotAllowedError
from browser_updater.config.parser import SSHConfigParser
from browser_updater.config.settings import Settings

__all__ = [
    "Config",
    "HostKeyVerifier",
    "HostNotAllowedError",
    "SSHConfigParser",
    "Settings",
]
