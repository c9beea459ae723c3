"""Service layer exports."""

from .errors import MissingSectionError, NotFoundError, SaveLoadError, SaveMismatchError
from .game_service import ActiveGame, GameService
from .inventory_service import InventoryService
from .navigation_service import ChoiceResult, NavigationService, NavigationWarning, SectionView
from .session_store import LastPlayed, SessionStore

__all__ = [
    "ActiveGame",
    "ChoiceResult",
    "GameService",
    "InventoryService",
    "LastPlayed",
    "MissingSectionError",
    "NavigationService",
    "NavigationWarning",
    "NotFoundError",
    "SaveLoadError",
    "SaveMismatchError",
    "SectionView",
    "SessionStore",
]
