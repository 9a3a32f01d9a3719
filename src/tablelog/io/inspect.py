"""
Polars views over a TableState for inspection and debugging.

Frames are built from the in-memory state only; no data files are read.

Notes
- Partition values become one ``partition.<column>`` Utf8 column per partition
  column declared in the state's Metadata (null where a file lacks the key).
- Empty states yield empty frames with the same schema.
"""

from __future__ import annotations

import polars as pl

from tablelog.core.state import TableState

_FILE_SCHEMA: dict[str, pl.DataType] = {
    "path": pl.Utf8(),
    "size": pl.Int64(),
    "modification_time": pl.Int64(),
    "data_change": pl.Boolean(),
    "stats": pl.Utf8(),
}

_TOMBSTONE_SCHEMA: dict[str, pl.DataType] = {
    "path": pl.Utf8(),
    "deletion_timestamp": pl.Int64(),
    "data_change": pl.Boolean(),
}


def active_files_frame(state: TableState) -> pl.DataFrame:
    """
    One row per active file, sorted by path.

    Args:
        state (TableState): Replayed state.

    Returns:
        pl.DataFrame: Columns path, size, modification_time, data_change, stats and
        one ``partition.<col>`` column per partition column.
    """
    part_cols = list(state.metadata.partition_columns) if state.metadata is not None else []
    schema = dict(_FILE_SCHEMA)
    for col in part_cols:
        schema[f"partition.{col}"] = pl.Utf8()

    rows = []
    for path in sorted(state.active_files):
        add = state.active_files[path]
        row = {
            "path": add.path,
            "size": add.size,
            "modification_time": add.modification_time,
            "data_change": add.data_change,
            "stats": add.stats,
        }
        for col in part_cols:
            row[f"partition.{col}"] = add.partition_values.get(col)
        rows.append(row)
    return pl.DataFrame(rows, schema=schema)


def tombstones_frame(state: TableState) -> pl.DataFrame:
    """One row per tombstone, sorted by path; deletion_timestamp is null when absent."""
    rows = [
        {
            "path": r.path,
            "deletion_timestamp": r.deletion_timestamp,
            "data_change": r.data_change,
        }
        for r in (state.tombstones[p] for p in sorted(state.tombstones))
    ]
    return pl.DataFrame(rows, schema=_TOMBSTONE_SCHEMA)
