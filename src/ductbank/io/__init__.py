from __future__ import annotations

from .configuration import (
    load_conductor_table,
    load_snapshot,
    save_conductor_table,
    save_snapshot,
    snapshot_from_payload,
    snapshot_to_payload,
)

__all__ = [
    "load_conductor_table",
    "load_snapshot",
    "save_conductor_table",
    "save_snapshot",
    "snapshot_from_payload",
    "snapshot_to_payload",
]
