"""
Core package for the tablelog transaction log (actions, serde, replay, protocol gate).

## Contracts (single source of truth)
- Actions — frozen pydantic models for AddFile, RemoveFile, Metadata, Protocol.
- Serde — single-field envelope encoding and precedence-based decoding.
- Replay — gapless fold of version batches into a TableState.
- Versioning — protocol gate against explicitly supplied supported versions.
- Schema — cached structured parse of Metadata.schemaString.
- Errors/Constants/Hashing — typed failures, defaults, canonical JSON.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Field names are lower_snake in Python and camelCase on the wire.

## Downstream usage
- tablelog.io — reads/writes batches and checkpoints through a log store, replays
  them with `replay`, and gates reads and commits with `check_protocol`.
- tablelog.cli — prints snapshots built by tablelog.io.

## Examples
```python
from tablelog.core.actions import AddFile, Metadata, Protocol
from tablelog.core.replay import VersionBatch, replay

add = AddFile(path="a.parquet", partition_values={}, size=10, modification_time=0, data_change=True)
state = replay(None, [VersionBatch(0, (Protocol(), Metadata(id="t"), add))])
state.active_files["a.parquet"].size  # 10
```
"""
