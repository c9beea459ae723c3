"""Factory helpers for runtime state."""

from .player_factory import create_player_for_story

__all__ = ["create_player_for_story"]
