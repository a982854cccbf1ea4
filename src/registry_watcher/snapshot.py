"""Registry snapshot value object."""

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from .utils import current_millis, format_iso_millis


class Snapshot(BaseModel):
    """
    Immutable capture of the registry state.

    The payload is the registry's own serialization and is treated as opaque
    text. Equality and hashing look at the payload only, so a re-fetch of an
    unchanged registry compares equal to the stored snapshot even though the
    capture times differ.
    """

    model_config = ConfigDict(frozen=True)

    payload: str = Field(..., min_length=1)
    captured_at: int = Field(default_factory=current_millis)  # ms since epoch

    @classmethod
    def capture(cls, payload: str, clock: Optional[Callable[[], int]] = None) -> "Snapshot":
        """Stamp freshly fetched data with the current time."""
        return cls(payload=payload, captured_at=(clock or current_millis)())

    @property
    def captured_at_iso(self) -> str:
        """Capture time in ISO 8601 (UTC, millisecond precision)."""
        return format_iso_millis(self.captured_at)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self.payload == other.payload

    def __hash__(self) -> int:
        return hash(self.payload)

    def __repr__(self) -> str:
        return f"Snapshot(captured_at={self.captured_at}, size={len(self.payload)})"
