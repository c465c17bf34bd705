"""HTTP API for the WhatsApp hub."""

from .app import create_app

__all__ = ["create_app"]
