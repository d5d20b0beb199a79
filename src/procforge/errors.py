from __future__ import annotations

from typing import Optional


class ProcForgeError(Exception):
    pass


class GenreLookupError(ProcForgeError, LookupError):
    def __init__(self, genre_id: str) -> None:
        self.genre_id = genre_id
        super().__init__(f"Unknown genre '{genre_id}'.")


class PresetLookupError(ProcForgeError, LookupError):
    def __init__(self, preset_name: str) -> None:
        self.preset_name = preset_name
        super().__init__(f"Unknown preset blend '{preset_name}'.")


class ValidationError(ProcForgeError, ValueError):
    """First structural violation found in a generated collection."""

    def __init__(self, reason: str, index: Optional[int] = None, name: str = "") -> None:
        self.reason = reason
        self.index = index
        self.name = name
        if index is None:
            message = reason
        elif name:
            message = f"#{index} ({name}): {reason}"
        else:
            message = f"#{index}: {reason}"
        super().__init__(message)
