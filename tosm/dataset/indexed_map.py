"""
Indexed map

Dataset store plus the spatial index over its nodes
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..geo import haversine, haversine_to_box
from ..spatial_index import SpatialIndex
from .models import Node, Way
from .store import DatasetStore


@dataclass
class IndexedMap:
    """
    Loaded map data with nearest-node lookup
    
    Usage:
        indexed_map = MapLoader().load_file("iceland.json")
        indexed_map.nearest(64.142257, -21.938559, k=1)  # [(distance_km, node_id)]
    """
    store: DatasetStore = field(default_factory=DatasetStore)
    spatial_index: SpatialIndex = field(default_factory=SpatialIndex)
    
    def nearest(self, lat: float, lon: float, k: int = 1) -> List[Tuple[float, int]]:
        """
        Find the k nodes closest to a coordinate
        
        Args:
            lat: Query latitude in degrees
            lon: Query longitude in degrees
            k: Number of nodes wanted (clamped to the number of nodes)
        
        Returns:
            (distance_km, node_id) pairs, nearest first
        """
        return self.spatial_index.nearest(
            (lat, lon), k, haversine, box_distance_fn=haversine_to_box
        )
    
    def get_node(self, node_id: int) -> Optional[Node]:
        return self.store.get_node(node_id)
    
    def get_way(self, way_id: int) -> Optional[Way]:
        return self.store.get_way(way_id)
    
    @property
    def node_count(self) -> int:
        return len(self.store.nodes)
    
    @property
    def way_count(self) -> int:
        return len(self.store.ways)
