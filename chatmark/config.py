"""Configuration system for chatmark."""

import os
from dataclasses import dataclass, field


def _optional_env(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


@dataclass
class Config:
    """chatmark configuration loaded from environment variables."""

    max_message_length: int = field(default_factory=lambda:
        int(os.environ.get("CHATMARK_MAX_MESSAGE_LENGTH", "2000"))
    )
    server_id: str | None = field(default_factory=lambda:
        _optional_env("CHATMARK_SERVER_ID")
    )
    link_target: str = field(default_factory=lambda:
        os.environ.get("CHATMARK_LINK_TARGET", "_blank")
    )

    def exceeds_limit(self, content: str) -> bool:
        """Return True if ``content`` is longer than a message may be."""
        return len(content) > self.max_message_length

    def clamp(self, content: str) -> str:
        """Cut ``content`` down to the maximum message length."""
        return content[:self.max_message_length]


_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton configuration."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _config
    _config = None
