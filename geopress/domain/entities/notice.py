from dataclasses import dataclass


@dataclass(frozen=True)
class Notice:
    """User-facing notification text (rendered as a toast by the UI)."""

    level: str  # "info", "success", "error"
    text: str
