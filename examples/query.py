"""Query a witness table - list every value a variable took across paths."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 3:
        print("Usage: python query.py <export_dir> <key>")
        print("Example: python query.py witness_out/ req.path")
        sys.exit(1)

    export_dir = Path(sys.argv[1])
    key = sys.argv[2]

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW entries AS SELECT * FROM '{export_dir}/witness/entries.parquet'")

    sql = """
    SELECT
        path_index,
        qualifier,
        tag,
        length,
        raw_hex
    FROM entries
    WHERE key = ?
    ORDER BY path_index, qualifier
    """

    print(f"--- Witness values: {key} ---\n")

    df = con.execute(sql, [key]).fetchdf()
    if df.empty:
        print("Variable was never marked on any exported path.")
    else:
        for _, row in df.iterrows():
            print(f"PATH {row['path_index']}: {row['qualifier']} ({row['tag']})")
            print(f"  Length: {row['length']}")
            print(f"  Raw: {row['raw_hex'][:80]}")
            print()


if __name__ == "__main__":
    main()
