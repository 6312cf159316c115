"""Concolic Core - variable naming, marking and assignment decoding."""
from .assignment import AssignmentEntry, convert_value, decode_assignment, decode_entry
from .errors import (
    AllocationError,
    ConcolicError,
    ConstraintError,
    IdentifierTooLongError,
    InvariantViolation,
    PathDiscarded,
    PreconditionError,
    UnsupportedTypeError,
)
from .gateway import DisabledGateway, EngineGateway, Predicate, ReplayGateway
from .names import KindTag, VariableName, decode_name, encode_name
from .session import ConcolicSession
from .sizes import SizeBounds, check_size, constrain_size

__all__ = [
    "AssignmentEntry", "convert_value", "decode_assignment", "decode_entry",
    "AllocationError", "ConcolicError", "ConstraintError",
    "IdentifierTooLongError", "InvariantViolation", "PathDiscarded",
    "PreconditionError", "UnsupportedTypeError",
    "DisabledGateway", "EngineGateway", "Predicate", "ReplayGateway",
    "KindTag", "VariableName", "decode_name", "encode_name",
    "ConcolicSession",
    "SizeBounds", "check_size", "constrain_size",
]
