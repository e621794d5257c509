"""socketbot — Slack Socket Mode echo bot."""

__version__ = "0.1.0"
