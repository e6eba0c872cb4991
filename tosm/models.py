"""
Pydantic models for source documents
Matches the JSON layouts accepted by the document parser
"""

from typing import Annotated, List, Optional, Dict, Any
from pydantic import BaseModel, Field

# Node and way ids are unsigned 64-bit integers
UINT64_MAX = 2 ** 64 - 1

ElementId = Annotated[int, Field(ge=0, le=UINT64_MAX)]


# ============================================================
# Native Layout
# ============================================================

class SourceNode(BaseModel):
    id: ElementId
    lat: float
    lon: float


class SourceWay(BaseModel):
    id: ElementId
    node_ids: List[ElementId] = Field(default_factory=list)
    one_way: bool = False
    name: Optional[str] = None


class SourceDocument(BaseModel):
    """{"nodes": [...], "ways": [...]}"""
    nodes: List[SourceNode]
    ways: List[SourceWay]


# ============================================================
# Overpass Layout
# ============================================================

class OverpassElement(BaseModel):
    """Any Overpass element; only nodes and ways are used"""
    type: str
    id: ElementId
    lat: Optional[float] = None
    lon: Optional[float] = None
    nodes: List[ElementId] = Field(default_factory=list)
    tags: Dict[str, Any] = Field(default_factory=dict)


class OverpassDocument(BaseModel):
    """{"elements": [{"type": "node" | "way" | ..., ...}]}"""
    elements: List[OverpassElement]
