"""Engine gateways: the capability the marker uses to reach the engine."""
from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .assignment import convert_value
from .errors import PathDiscarded
from .names import decode_name

_OPS = {
    ">=": operator.ge,
    "<=": operator.le,
    "<": operator.lt,
}


@dataclass(frozen=True)
class Predicate:
    """``<variable> <op> <bound>`` over a previously marked variable."""

    identifier: str
    op: str
    bound: int

    def __post_init__(self):
        if self.op not in _OPS:
            raise ValueError(f"Unsupported predicate operator {self.op!r}")

    def holds(self, value: int) -> bool:
        return _OPS[self.op](value, self.bound)

    def __str__(self) -> str:
        return f"{self.identifier} {self.op} {self.bound}"


class EngineGateway(ABC):
    @abstractmethod
    def is_active(self) -> bool:
        """Whether concolic tracking is enabled for this process."""

    @abstractmethod
    def mark_concolic(self, buffer: memoryview, identifier: str) -> None:
        """Register ``buffer`` as a free variable, keeping its bytes as the
        concrete value of the current path."""

    @abstractmethod
    def assume(self, predicate: Predicate) -> None:
        """Add a path constraint. It must be satisfiable."""


class DisabledGateway(EngineGateway):
    """Process not running under the engine."""

    def is_active(self) -> bool:
        return False

    def mark_concolic(self, buffer: memoryview, identifier: str) -> None:
        raise RuntimeError("Engine is not active")

    def assume(self, predicate: Predicate) -> None:
        raise RuntimeError("Engine is not active")


class ReplayGateway(EngineGateway):
    """In-process stand-in for the engine.

    Records marked buffers and assumptions in call order, and checks each
    assumption against the concrete value recorded for its variable.
    ``assignment()`` is the witness for the single path being replayed.
    """

    def __init__(self, active: bool = True):
        self.active = active
        self.calls: list[tuple[str, object]] = []
        self._values: dict[str, bytes] = {}

    def is_active(self) -> bool:
        return self.active

    def mark_concolic(self, buffer: memoryview, identifier: str) -> None:
        data = bytes(buffer)
        self._values[identifier] = data
        self.calls.append(("mark", identifier))

    def assume(self, predicate: Predicate) -> None:
        self.calls.append(("assume", predicate))
        data = self._values.get(predicate.identifier)
        if data is None:
            raise PathDiscarded(f"no concrete value for {predicate.identifier!r}")
        value = convert_value(data, decode_name(predicate.identifier)[2])
        if not predicate.holds(value):
            raise PathDiscarded(f"{predicate} with {predicate.identifier}={value}")

    @property
    def marks(self) -> list[str]:
        return [ident for kind, ident in self.calls if kind == "mark"]

    @property
    def assumptions(self) -> list[Predicate]:
        return [pred for kind, pred in self.calls if kind == "assume"]

    def assignment(self) -> dict[str, bytes]:
        return dict(self._values)
