"""Witness files: engine assignments on disk, and their parquet table."""
from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from concolic_core.assignment import AssignmentTree, convert_value, split_entry

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

WITNESS_SCHEMA = pa.schema(
    [
        ("path_index", pa.int32()),
        ("identifier", pa.string()),
        ("key", pa.string()),
        ("qualifier", pa.string()),
        ("tag", pa.string()),
        ("length", pa.int32()),
        ("content_hash", pa.string()),
        ("raw_hex", pa.string()),
    ]
)


def load_assignment(path: Path) -> dict[str, bytes]:
    """Read an assignment file: a JSON object of identifier -> hex bytes."""
    obj = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(obj, dict):
        raise ValueError(f"Assignment file {path} must hold a JSON object")

    assignment: dict[str, bytes] = {}
    for identifier, raw_hex in obj.items():
        if not isinstance(raw_hex, str):
            raise ValueError(f"Value of {identifier!r} must be a hex string")
        assignment[identifier] = bytes.fromhex(raw_hex)
    return assignment


def dump_assignment(assignment: Mapping[str, bytes], path: Path) -> None:
    obj = {ident: bytes(raw).hex() for ident, raw in assignment.items()}
    Path(path).write_text(json.dumps(obj, **CANONICAL_JSON_KW), encoding="utf-8")


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return value


def tree_to_json(tree: AssignmentTree) -> str:
    """Canonical JSON for a decoded tree; raw byte values render as hex."""
    plain = {
        key: {qual: _jsonable(val) for qual, val in fields.items()}
        for key, fields in tree.items()
    }
    return json.dumps(plain, **CANONICAL_JSON_KW)


def witness_rows(assignments: Sequence[Mapping[str, bytes]]) -> list[dict]:
    rows: list[dict] = []
    for index, assignment in enumerate(assignments):
        for identifier, raw in assignment.items():
            entry = split_entry(identifier, raw)
            # Reject entries the decoder could not rebuild
            convert_value(entry.raw, entry.tag)
            rows.append(
                {
                    "path_index": index,
                    "identifier": identifier,
                    "key": entry.key,
                    "qualifier": entry.qualifier,
                    "tag": entry.tag.value,
                    "length": len(entry.raw),
                    "content_hash": hashlib.sha256(entry.raw).hexdigest(),
                    "raw_hex": entry.raw.hex(),
                }
            )
    return rows


def export_witnesses(assignments: Sequence[Mapping[str, bytes]], out_path: Path) -> Path | None:
    """Write witness/entries.parquet under ``out_path``.

    Returns the table path, or None when there is nothing to write.
    """
    rows = witness_rows(assignments)

    (Path(out_path) / "witness").mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(rows)
    if df.empty:
        return None

    df = df.sort_values(["path_index", "identifier"])
    table = pa.Table.from_pandas(df, schema=WITNESS_SCHEMA, preserve_index=False)
    target = Path(out_path) / "witness" / "entries.parquet"
    pq.write_table(table, target)
    return target
