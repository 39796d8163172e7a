"""chatmark - chat message markdown with safe links and mentions."""

__version__ = "0.1.0"
