"""API route handlers."""

from api.routes import health, polls, resolution, stakes, votes, wallet

__all__ = ["health", "polls", "resolution", "stakes", "votes", "wallet"]
