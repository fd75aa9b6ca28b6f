"""echopan: republish podcast feed episodes to Telegram channels."""

__version__ = "0.1.0"
