"""Service-layer exceptions."""


class MissingSectionError(Exception):
    """Raised when a choice resolves to a section the story does not contain."""

    def __init__(self, story_id: str, section_id: str) -> None:
        super().__init__(f"Story '{story_id}' has no section '{section_id}'.")
        self.story_id = story_id
        self.section_id = section_id


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""


class NotFoundError(SaveLoadError):
    """Raised when no save exists for the requested story and slot."""

    def __init__(self, story_id: str, slot: int) -> None:
        super().__init__(f"No save found for story '{story_id}' in slot {slot}.")
        self.story_id = story_id
        self.slot = slot


class SaveMismatchError(SaveLoadError):
    """Raised by a strict load when the save belongs to another story."""

    def __init__(
        self,
        active_story_id: str,
        saved_story_id: str,
        *,
        active_title: str | None = None,
        saved_title: str | None = None,
    ) -> None:
        self.active_story_id = active_story_id
        self.saved_story_id = saved_story_id
        self.active_title = active_title or active_story_id
        self.saved_title = saved_title or saved_story_id
        super().__init__(
            f"This save belongs to '{self.saved_title}', but '{self.active_title}' is being played."
        )
