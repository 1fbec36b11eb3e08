"""Single-resolution tokens for recognition sessions and utterances."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count

_ids = count(1)


@dataclass(slots=True)
class CancellationToken:
    """Marks one operation; once it is no longer live, its callbacks are ignored."""

    id: int = field(default_factory=lambda: next(_ids))
    cancelled: bool = False
    resolved: bool = False

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.resolved)

    def cancel(self) -> None:
        self.cancelled = True

    def resolve(self) -> bool:
        """Mark the operation finished; return ``False`` if it already was."""
        if not self.live:
            return False
        self.resolved = True
        return True
