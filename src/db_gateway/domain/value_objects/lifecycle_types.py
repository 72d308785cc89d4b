"""Schema lifecycle states."""

from __future__ import annotations

from enum import Enum, auto


class GateState(Enum):
    """Schema version gate states.

    State machine for one attachment of a lifecycle observer:

        UNATTACHED ──file missing──> CREATED
             │                          │
             └──────────┬───────────────┘
                        v
                 VERSION_CHECKED   (upgrade callback ran if stored < target)
                        │
                        v
                      READY        (open callback ran)

    Any error routed to the observer's on_error moves the gate to FAILED.
    Reattaching an observer starts again from UNATTACHED.
    """

    UNATTACHED = auto()
    """No observer attached, or attachment not yet started."""

    CREATED = auto()
    """The file did not exist; the create callback ran and the version was written."""

    VERSION_CHECKED = auto()
    """Persisted version compared with the target; upgrade ran if needed."""

    READY = auto()
    """Open callback ran. The database is usable."""

    FAILED = auto()
    """Attachment stopped after reporting an error to the observer."""

    def is_terminal(self) -> bool:
        """Check if this attachment has finished, successfully or not."""
        return self in (GateState.READY, GateState.FAILED)
