"""Alertmanager to Telegram bridge."""

__version__ = "0.4.0"
