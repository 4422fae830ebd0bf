"""Local account and session profile."""

from rampa.session.profile import ProfileStore, UserProfile

__all__ = ["ProfileStore", "UserProfile"]
