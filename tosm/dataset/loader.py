"""
Map loader

Builds the dataset store and spatial index from a source document
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from loguru import logger

from ..config import TOSMConfig, get_config
from ..exceptions import DuplicateIdError
from ..spatial_index import SpatialIndex
from .indexed_map import IndexedMap
from .models import Node, Way
from .parser import DocumentParser
from .store import DatasetStore


class MapLoader:
    """
    Load nodes and ways into an IndexedMap
    
    Nodes are appended in source order, each recorded in the id lookup and
    inserted into the spatial index under its (lat, lon). Ways follow.
    Any failure aborts the load; nothing partial is returned.
    """
    
    def __init__(self, config: Optional[TOSMConfig] = None):
        self.config = config or get_config()
        self.parser = DocumentParser()
    
    def load_file(self, path: Union[str, Path]) -> IndexedMap:
        """Parse a JSON source document and index it"""
        nodes, ways = self.parser.parse_file(path)
        logger.info(f"Parsed {path}: {len(nodes)} nodes, {len(ways)} ways")
        return self.load(nodes, ways)
    
    def load_document(self, data) -> IndexedMap:
        """Index an already decoded JSON document"""
        nodes, ways = self.parser.parse_document(data)
        return self.load(nodes, ways)
    
    def load(self, nodes: Iterable[Node], ways: Iterable[Way]) -> IndexedMap:
        """
        Index parsed records
        
        Raises:
            DuplicateIdError: If ids repeat and duplicates are rejected
            SpatialIndexError: If a node has a non-finite coordinate
        """
        store = DatasetStore()
        spatial_index = SpatialIndex(bucket_capacity=self.config.index.bucket_capacity)
        reject = self.config.loader.reject_duplicate_ids
        duplicate_nodes = 0
        duplicate_ways = 0
        
        for node in nodes:
            if node.id in store.node_index:
                if reject:
                    raise DuplicateIdError(f"Duplicate node id {node.id}")
                duplicate_nodes += 1
            store.add_node(node)
            spatial_index.insert(node.point, node.id)
        
        for way in ways:
            if way.id in store.way_index:
                if reject:
                    raise DuplicateIdError(f"Duplicate way id {way.id}")
                duplicate_ways += 1
            store.add_way(way)
        
        if duplicate_nodes or duplicate_ways:
            logger.warning(
                f"Found {duplicate_nodes} duplicate node ids and {duplicate_ways} duplicate way ids; "
                f"lookups resolve to the last occurrence"
            )
        
        logger.info(f"Indexed {len(store.nodes)} nodes and {len(store.ways)} ways")
        return IndexedMap(store=store, spatial_index=spatial_index)
