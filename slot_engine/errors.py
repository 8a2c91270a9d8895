"""Infrastructure-level exceptions.

Domain outcomes (no availability, lost booking race, cancellation refused)
are typed result values in ``slot_engine.schemas.booking_schema``. Only the
failures below propagate up the call stack.
"""


class SlotEngineError(Exception):
    """Base class for all engine exceptions."""


class StoreUnavailableError(SlotEngineError):
    """The internal reservation or configuration store could not be reached.

    Retryable. Never interpreted as "no slots".
    """


class CommitTimeoutError(SlotEngineError):
    """A booking commit did not finish within the configured timeout.

    The outcome is unknown; callers must re-query before retrying.
    """


class ExternalSourceError(SlotEngineError):
    """The external busy-interval cache failed. Non-fatal for slot queries."""
