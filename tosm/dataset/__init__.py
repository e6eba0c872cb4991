"""
Map dataset module

- Models: Node and Way records
- Parser: source document parsing (native and Overpass layouts)
- Store: node/way sequences with id lookup
- IndexedMap: store plus spatial index, nearest-node queries
- Loader: builds an IndexedMap from a source document
"""

from .models import Node, Way
from .store import DatasetStore
from .indexed_map import IndexedMap
from .loader import MapLoader

__all__ = [
    "Node",
    "Way",
    "DatasetStore",
    "IndexedMap",
    "MapLoader",
]
