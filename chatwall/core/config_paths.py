"""Centralized configuration path management for chatwall.

This module provides a single source of truth for all configuration and data
file paths, following XDG Base Directory specification.
"""

import re
from pathlib import Path

# Storage keys become file names, so only a conservative character set is kept
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ConfigPaths:
    """Centralized configuration path management.

    All chatwall configuration and data files are stored in ~/.config/chatwall/
    following XDG Base Directory specification.
    """

    # XDG-compliant base directory
    BASE_DIR = Path.home() / ".config" / "chatwall"

    @classmethod
    def get_base_dir(cls) -> Path:
        """Get base configuration directory, creating if needed.

        Returns:
            Path to ~/.config/chatwall/
        """
        cls.BASE_DIR.mkdir(parents=True, exist_ok=True)
        return cls.BASE_DIR

    @classmethod
    def get_config_file(cls) -> Path:
        """Get path to main configuration file.

        Returns:
            Path to config.json
        """
        cls.get_base_dir()  # Ensure directory exists
        return cls.BASE_DIR / "config.json"

    @classmethod
    def get_sessions_dir(cls) -> Path:
        """Get path to the directory holding persisted chat snapshots.

        Returns:
            Path to sessions/
        """
        sessions_dir = cls.BASE_DIR / "sessions"
        sessions_dir.mkdir(parents=True, exist_ok=True)
        return sessions_dir

    @classmethod
    def get_session_file(cls, storage_key: str) -> Path:
        """Get path to the durable slot for a storage key.

        Args:
            storage_key: Logical name of the slot (e.g. "chat-messages")

        Returns:
            Path to sessions/<storage_key>.json
        """
        safe_key = _UNSAFE_KEY_CHARS.sub("_", storage_key).strip("._") or "default"
        return cls.get_sessions_dir() / f"{safe_key}.json"

    @classmethod
    def get_exports_dir(cls) -> Path:
        """Get path to exports directory.

        Returns:
            Path to exports/
        """
        exports_dir = cls.BASE_DIR / "exports"
        exports_dir.mkdir(parents=True, exist_ok=True)
        return exports_dir

    @classmethod
    def get_log_file(cls) -> Path:
        """Get path to debug log file.

        Returns:
            Path to chatwall.log
        """
        cls.get_base_dir()  # Ensure directory exists
        return cls.BASE_DIR / "chatwall.log"
