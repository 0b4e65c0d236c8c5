"""HTTP API around otpkit (Flask)."""

from .app import create_app

__all__ = ["create_app"]
