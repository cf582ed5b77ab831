"""Authentication against Firebase Authentication."""

from .client import AuthClient

__all__ = ["AuthClient"]
