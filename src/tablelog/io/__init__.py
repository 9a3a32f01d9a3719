"""
tablelog.io — Local log store and Table facade over tablelog.core.

## Responsibilities
- Persist and list version batches and checkpoints under `<table_root>/_delta_log`.
- Rebuild table state with checkpoint seeding and a per-version state cache.
- Gate every returned state (read) and every new version (write) on the table Protocol.

## Public API
- LogSettings — configuration (defaults sourced from tablelog.core.constants).
- Table — snapshot/commit/checkpoint facade.
- LocalLogStore — file-protocol log store.

## Import DAG discipline
- Depends only on stdlib, polars (inspect), and tablelog.core.*.
- MUST NOT import tablelog.cli.

## Examples
```python
from tablelog.core.actions import AddFile, Metadata, Protocol
from tablelog.io import LogSettings, Table

table = Table(LogSettings(table_root="out/events"))  # doctest: +SKIP
table.commit([Protocol(), Metadata(partition_columns=["date"])])  # doctest: +SKIP
state = table.snapshot()  # doctest: +SKIP
```

## Notes
- Write path: tmp file → fsync → os.replace(tmp, final) on the same filesystem.
- Single writer: versions are never overwritten, but competing writers are not coordinated.
"""

from __future__ import annotations

from .config import LogSettings
from .log_store import LocalLogStore
from .table import Table

__all__ = [
    "LogSettings",
    "LocalLogStore",
    "Table",
]
