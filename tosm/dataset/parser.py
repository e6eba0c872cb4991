"""
Source document parser

Parses JSON source documents into Node and Way records
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from loguru import logger
from pydantic import ValidationError

from ..exceptions import DocumentError
from ..models import OverpassDocument, SourceDocument
from .models import Node, Way

# Overpass "oneway" tag values meaning the way is directional
ONE_WAY_TAG_VALUES = {"yes", "true", "1", "-1"}


class DocumentParser:
    """Parses source documents in the native or Overpass layout"""
    
    @staticmethod
    def parse_file(path: Union[str, Path]) -> Tuple[List[Node], List[Way]]:
        """
        Read and parse a JSON document from disk
        
        The whole file is read into memory before parsing.
        
        Raises:
            DocumentError: If the file cannot be read or is malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise DocumentError(f"Cannot read source document {path}: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError and UnicodeDecodeError
            raise DocumentError(f"Source document {path} is not valid JSON: {e}") from e
        
        logger.debug(f"Read source document {path}")
        return DocumentParser.parse_document(data)
    
    @staticmethod
    def parse_document(data: Any) -> Tuple[List[Node], List[Way]]:
        """
        Parse a decoded JSON document into nodes and ways
        
        Documents with an "elements" key are treated as Overpass API
        responses, anything else as {"nodes": [...], "ways": [...]}.
        
        Returns:
            Tuple of (nodes list, ways list) in source order
        """
        if not isinstance(data, dict):
            raise DocumentError(f"Source document must be a JSON object, got {type(data).__name__}")
        
        if "elements" in data:
            return DocumentParser.parse_elements(data)
        
        try:
            document = SourceDocument.model_validate(data)
        except ValidationError as e:
            raise DocumentError(f"Malformed source document: {e}") from e
        
        nodes = [Node(id=n.id, lat=n.lat, lon=n.lon) for n in document.nodes]
        ways = [
            Way(id=w.id, node_ids=tuple(w.node_ids), one_way=w.one_way, name=w.name)
            for w in document.ways
        ]
        return nodes, ways
    
    @staticmethod
    def parse_elements(data: Dict[str, Any]) -> Tuple[List[Node], List[Way]]:
        """
        Parse an Overpass response into nodes and ways
        
        Way direction comes from the "oneway" tag and the label from
        "name". Relations and other element types are skipped.
        
        Args:
            data: JSON response from Overpass API ('out body' format)
            
        Returns:
            Tuple of (nodes list, ways list)
        """
        try:
            document = OverpassDocument.model_validate(data)
        except ValidationError as e:
            raise DocumentError(f"Malformed Overpass document: {e}") from e
        
        nodes = []
        ways = []
        skipped = 0
        
        for element in document.elements:
            if element.type == "node":
                if element.lat is None or element.lon is None:
                    raise DocumentError(f"Overpass node {element.id} has no coordinates")
                nodes.append(Node(id=element.id, lat=element.lat, lon=element.lon))
            elif element.type == "way":
                oneway = str(element.tags.get("oneway", "no")).lower()
                name = element.tags.get("name")
                ways.append(Way(
                    id=element.id,
                    node_ids=tuple(element.nodes),
                    one_way=oneway in ONE_WAY_TAG_VALUES,
                    name=str(name) if name is not None else None
                ))
            else:
                skipped += 1
        
        if skipped:
            logger.debug(f"Skipped {skipped} Overpass elements that are neither nodes nor ways")
        
        return nodes, ways
