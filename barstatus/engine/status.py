from enum import Enum


class BarStatus(str, Enum):
    OPENING_SOON = "opening_soon"
    OPEN = "open"
    CLOSING_SOON = "closing_soon"
    CLOSED = "closed"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_token(cls, token, default=None):
        """Parse a wire token, returning `default` for anything unrecognised."""
        try:
            return cls(token)
        except ValueError:
            return default


_DISPLAY_NAMES = {
    BarStatus.OPENING_SOON: "Opening Soon",
    BarStatus.OPEN: "Open",
    BarStatus.CLOSING_SOON: "Closing Soon",
    BarStatus.CLOSED: "Closed",
}

# Statuses a viewer should treat as "worth heading over"
OPEN_NOW_STATUSES = (BarStatus.OPEN, BarStatus.OPENING_SOON)
