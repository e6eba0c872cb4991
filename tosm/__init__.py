"""
TOSM map index

Indexes street-map nodes and ways for nearest-node queries and persists the
index as a compressed binary snapshot.
"""

from .config import get_config, validate_config, TOSMConfig
from .dataset import Node, Way, DatasetStore, IndexedMap, MapLoader
from .exceptions import (
    TOSMError,
    DocumentError,
    DuplicateIdError,
    SpatialIndexError,
    SnapshotError,
    SnapshotIOError,
    SnapshotDecompressionError,
    SnapshotDecodeError,
)
from .geo import haversine, haversine_to_box, EARTH_RADIUS_KM
from .pipeline import MapPipeline
from .snapshot import read_snapshot, write_snapshot
from .spatial_index import SpatialIndex, clamped_box_distance

__all__ = [
    "get_config",
    "validate_config",
    "TOSMConfig",
    "Node",
    "Way",
    "DatasetStore",
    "IndexedMap",
    "MapLoader",
    "MapPipeline",
    "SpatialIndex",
    "clamped_box_distance",
    "haversine",
    "haversine_to_box",
    "EARTH_RADIUS_KM",
    "read_snapshot",
    "write_snapshot",
    "TOSMError",
    "DocumentError",
    "DuplicateIdError",
    "SpatialIndexError",
    "SnapshotError",
    "SnapshotIOError",
    "SnapshotDecompressionError",
    "SnapshotDecodeError",
]
