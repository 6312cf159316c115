"""Error taxonomy for concolic marking and assignment decoding."""
from __future__ import annotations

ERRORS = {
  "E_ENGINE_INACTIVE": "Not in symbolic mode",
  "E_CONSTRAINT": "Incompatible value constraints",
  "E_UNSUPPORTED_TYPE": "Unsupported type",
  "E_ALLOCATION": "Cannot allocate concolic buffer",
  "E_NAME_TOO_LONG": "Identifier exceeds engine name limit",
  "E_INVARIANT": "Naming protocol invariant violated",
  "E_PATH_DISCARDED": "Assumption does not hold on the current path",
}


class ConcolicError(Exception):
    """Base class. ``code`` indexes :data:`ERRORS`."""

    code = ""

    def __init__(self, detail: str | None = None):
        self.detail = detail
        msg = ERRORS.get(self.code, "")
        super().__init__(f"{msg}: {detail}" if detail else msg)


class PreconditionError(ConcolicError, RuntimeError):
    """The engine is not active. Raised before any value is touched."""

    code = "E_ENGINE_INACTIVE"


class ConstraintError(ConcolicError, ValueError):
    """A value violates its declared bounds, or the bounds are malformed."""

    code = "E_CONSTRAINT"


class UnsupportedTypeError(ConcolicError, TypeError):
    code = "E_UNSUPPORTED_TYPE"


class AllocationError(ConcolicError, MemoryError):
    code = "E_ALLOCATION"


class IdentifierTooLongError(ConcolicError, ValueError):
    """An encoded identifier would not fit the engine's name buffer."""

    code = "E_NAME_TOO_LONG"


class InvariantViolation(ConcolicError):
    """Producer and consumer disagree on the naming protocol.

    Fatal: the library never catches this.
    """

    code = "E_INVARIANT"


class PathDiscarded(ConcolicError):
    code = "E_PATH_DISCARDED"
