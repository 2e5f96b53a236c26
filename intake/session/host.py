"""SessionHost Protocol: what a draft session needs from its surroundings.

The host is the presentation layer plus router and clipboard. Sessions call it
synchronously, except for the clipboard which may suspend.
"""

from typing import Protocol, runtime_checkable

from intake.schemas.session import SessionSnapshot


@runtime_checkable
class SessionHost(Protocol):
    def render(self, snapshot: SessionSnapshot) -> None:
        """Re-render from the latest session state."""
        ...

    def notify(self, message: str) -> None:
        """Show a user-facing message (draft missing, save or submit failed, link copied)."""
        ...

    def navigate_home(self) -> None:
        """Leave the form and return to the entry point."""
        ...

    async def copy_to_clipboard(self, text: str) -> None:
        """Best-effort clipboard write. May raise; sessions swallow the failure."""
        ...
