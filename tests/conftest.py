"""
Shared pytest fixtures for the TOSM test suite.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path so cli.py is importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tosm import MapLoader


@pytest.fixture
def reykjavik_document():
    """Two nodes near Reykjavik and one way between them."""
    return {
        "nodes": [
            {"id": 1, "lat": 64.0, "lon": -21.0},
            {"id": 2, "lat": 64.2, "lon": -21.9},
        ],
        "ways": [
            {"id": 100, "node_ids": [1, 2], "one_way": True, "name": "Fjólugata"},
        ],
    }


@pytest.fixture
def grid_document():
    """A 20x20 grid of nodes 0.01 degrees apart plus one way per row."""
    nodes = []
    for row in range(20):
        for col in range(20):
            nodes.append({
                "id": 1000 + row * 20 + col,
                "lat": 64.0 + row * 0.01,
                "lon": -22.0 + col * 0.01,
            })
    ways = [
        {
            "id": 5000 + row,
            "node_ids": [1000 + row * 20 + col for col in range(20)],
            "one_way": row % 2 == 0,
            "name": f"Row {row}" if row % 3 else None,
        }
        for row in range(20)
    ]
    return {"nodes": nodes, "ways": ways}


@pytest.fixture
def overpass_document():
    """Overpass 'out body' response with two nodes, two ways and a relation."""
    return {
        "version": 0.6,
        "elements": [
            {"type": "node", "id": 35618126, "lat": 64.1422, "lon": -21.9385},
            {"type": "node", "id": 35618127, "lat": 64.1430, "lon": -21.9370,
             "tags": {"highway": "crossing"}},
            {"type": "way", "id": 4001, "nodes": [35618126, 35618127],
             "tags": {"highway": "residential", "name": "Fjólugata", "oneway": "yes"}},
            {"type": "way", "id": 4002, "nodes": [35618127, 35618126],
             "tags": {"highway": "service"}},
            {"type": "relation", "id": 9, "members": []},
        ],
    }


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document into tmp_path and return its path."""
    def _write(data, name="source.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def grid_map(grid_document):
    """IndexedMap built from the grid document."""
    return MapLoader().load_document(grid_document)
