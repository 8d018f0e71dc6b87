"""HTTP routers for the review API."""

from . import health, review

__all__ = ["health", "review"]
