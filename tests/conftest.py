import pytest

from concolic_core.gateway import EngineGateway, Predicate, ReplayGateway
from concolic_core.session import ConcolicSession


class RecordingGateway(EngineGateway):
    """Records calls without evaluating anything."""

    def __init__(self):
        self.calls = []

    def is_active(self) -> bool:
        return True

    def mark_concolic(self, buffer, identifier):
        self.calls.append(("mark", identifier, bytes(buffer)))

    def assume(self, predicate: Predicate):
        self.calls.append(("assume", predicate))


@pytest.fixture
def recorder():
    return RecordingGateway()


@pytest.fixture
def replay():
    return ReplayGateway()


@pytest.fixture
def session(replay):
    return ConcolicSession(replay, max_symbolic_size=16)


class RewritingGateway(ReplayGateway):
    """Writes fixed bytes into chosen buffers, as the engine does on
    another path, before recording them."""

    def __init__(self, rewrites):
        super().__init__()
        self.rewrites = rewrites

    def mark_concolic(self, buffer, identifier):
        if identifier in self.rewrites:
            buffer[:] = self.rewrites[identifier]
        super().mark_concolic(buffer, identifier)


@pytest.fixture
def rewriting_gateway():
    return RewritingGateway
