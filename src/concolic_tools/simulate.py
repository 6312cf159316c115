"""Simulated engine output: replay a sample harness and write assignment files.

Path 0 is the concrete run itself. Further paths are variants that keep
every recorded assumption satisfied, the way solved alternatives would.
"""
from __future__ import annotations

import random
import struct
from pathlib import Path

from concolic_core import ConcolicSession, KindTag, ReplayGateway, decode_name
from concolic_core.protocol import (
    DEFAULT_MAX_SYMBOLIC_SIZE,
    INT_FMT,
    SSIZE_FMT,
    UNICODE_CODEC,
    UNICODE_UNIT_WIDTH,
)
from concolic_tools.witness import dump_assignment


def sample_harness(session: ConcolicSession) -> None:
    """A request-like input, the kind a test harness would mark."""
    session.make_concolic_sequence(b"GET", "req.method", max_size=8, min_size=3)
    session.make_concolic_sequence("/index.html", "req.path", max_size=32, min_size=1)
    session.make_concolic_sequence({"Host": "example.org"}, "req.headers")
    session.make_concolic_sequence(["a", "b"], "req.args", max_size=4)
    session.make_concolic_sequence(("x",), "req.flags")
    session.make_concolic_int(3, "req.retries", max_value=5, min_value=0)


def assumption_bounds(gateway: ReplayGateway) -> dict[str, tuple[int, int]]:
    bounds: dict[str, list[int]] = {}
    for pred in gateway.assumptions:
        lo_hi = bounds.setdefault(pred.identifier, [0, 2 ** 31 - 1])
        if pred.op == ">=":
            lo_hi[0] = max(lo_hi[0], pred.bound)
        elif pred.op == "<=":
            lo_hi[1] = min(lo_hi[1], pred.bound)
        elif pred.op == "<":
            lo_hi[1] = min(lo_hi[1], pred.bound - 1)
    return {ident: (lo, hi) for ident, (lo, hi) in bounds.items()}


def mutate(assignment: dict[str, bytes], bounds: dict[str, tuple[int, int]],
           rng: random.Random) -> dict[str, bytes]:
    """Pick new sizes and integers inside their bounds; strings follow their size."""
    out = dict(assignment)
    for identifier, (lo, hi) in bounds.items():
        key, _, tag = decode_name(identifier)
        if tag is KindTag.INTEGER:
            out[identifier] = struct.pack(INT_FMT, rng.randint(lo, hi))
            continue

        size = rng.randint(lo, min(hi, lo + 16))
        out[identifier] = struct.pack(SSIZE_FMT, size)
        for value_tag, unit in ((KindTag.BYTE_STRING, 1),
                                (KindTag.UNICODE_STRING, UNICODE_UNIT_WIDTH)):
            value_id = f"{key}.{value_tag.value}#value"
            if value_id in out:
                fill = "z".encode(UNICODE_CODEC) if unit > 1 else b"z"
                data = (out[value_id] + fill * size)[: size * unit]
                out[value_id] = data
    return out


def generate_paths(out_dir: Path, paths: int = 1, seed: int = 0,
                   max_symbolic_size: int = DEFAULT_MAX_SYMBOLIC_SIZE) -> list[Path]:
    gateway = ReplayGateway()
    sample_harness(ConcolicSession(gateway, max_symbolic_size=max_symbolic_size))

    base = gateway.assignment()
    bounds = assumption_bounds(gateway)
    rng = random.Random(seed)

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    written = []
    for index in range(paths):
        assignment = base if index == 0 else mutate(base, bounds, rng)
        target = out / f"path-{index:04d}.json"
        dump_assignment(assignment, target)
        written.append(target)
    return written
