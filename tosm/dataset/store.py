"""
Dataset store

Owns the node and way sequences and the id -> position lookup maps
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import Node, Way


@dataclass
class DatasetStore:
    """
    Nodes and ways in source order with O(1) lookup by id
    
    The lookup maps hold zero-based positions into the sequences and are
    only ever written alongside them by add_node/add_way.
    """
    nodes: List[Node] = field(default_factory=list)
    ways: List[Way] = field(default_factory=list)
    node_index: Dict[int, int] = field(default_factory=dict)
    way_index: Dict[int, int] = field(default_factory=dict)
    
    def add_node(self, node: Node) -> int:
        """Append a node and point its id at it, returns the position"""
        self.nodes.append(node)
        position = len(self.nodes) - 1
        self.node_index[node.id] = position
        return position
    
    def add_way(self, way: Way) -> int:
        """Append a way and point its id at it, returns the position"""
        self.ways.append(way)
        position = len(self.ways) - 1
        self.way_index[way.id] = position
        return position
    
    def get_node(self, node_id: int) -> Optional[Node]:
        position = self.node_index.get(node_id)
        return None if position is None else self.nodes[position]
    
    def get_way(self, way_id: int) -> Optional[Way]:
        position = self.way_index.get(way_id)
        return None if position is None else self.ways[position]
    
    def validate(self) -> None:
        """
        Check that every lookup entry points at a record with the same id.
        Raises ValueError listing the offending entries.
        """
        errors = []
        for label, records, lookup in (
            ("node", self.nodes, self.node_index),
            ("way", self.ways, self.way_index),
        ):
            for record_id, position in lookup.items():
                if not 0 <= position < len(records):
                    errors.append(f"{label} {record_id} maps to position {position}, "
                                  f"outside 0..{len(records) - 1}")
                elif records[position].id != record_id:
                    errors.append(f"{label} {record_id} maps to position {position} "
                                  f"holding id {records[position].id}")
        
        if errors:
            raise ValueError("Dataset lookup validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
