"""
Dataset records

Immutable node and way records held by the dataset store
"""

from typing import Optional, Tuple
from dataclasses import dataclass


@dataclass(frozen=True)
class Node:
    """A geographic point"""
    id: int
    lat: float
    lon: float
    
    @property
    def point(self) -> Tuple[float, float]:
        """Spatial index key as (lat, lon)"""
        return (self.lat, self.lon)


@dataclass(frozen=True)
class Way:
    """An ordered path through node ids (ids may be missing from the store)"""
    id: int
    node_ids: Tuple[int, ...]
    one_way: bool = False
    name: Optional[str] = None
