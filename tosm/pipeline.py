"""
Map Pipeline

Load-or-build orchestration:

  1. Input: source JSON document and/or snapshot path
  2. Snapshot present: decompress and decode it
  3. Otherwise: parse the document, build store + spatial index
  4. Optionally persist the result as a snapshot for the next run
"""

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from .config import TOSMConfig, get_config
from .dataset import IndexedMap, MapLoader
from .exceptions import TOSMError
from .snapshot import read_snapshot, write_snapshot

PathLike = Union[str, Path]


class MapPipeline:
    """
    Produce an IndexedMap from a snapshot or a source document

    Usage:
        pipeline = MapPipeline()
        indexed_map = pipeline.run(source="iceland.json", snapshot="iceland.tosm.zst")
        indexed_map.nearest(64.142257, -21.938559)
    """

    def __init__(self, config: Optional[TOSMConfig] = None):
        self.config = config or get_config()
        self.loader = MapLoader(self.config)

    def run(
        self,
        source: Optional[PathLike] = None,
        snapshot: Optional[PathLike] = None,
        rebuild: bool = False
    ) -> IndexedMap:
        """
        Load the map, preferring an existing snapshot

        Args:
            source: Source JSON document
            snapshot: Snapshot file to read, or to write after building
            rebuild: Ignore an existing snapshot and rebuild from source

        Returns:
            Loaded IndexedMap

        Raises:
            ValueError: If neither a usable snapshot nor a source is given
            TOSMError: If any stage fails; the error names the stage
        """
        snapshot_path = Path(snapshot) if snapshot else None

        try:
            if snapshot_path and snapshot_path.exists() and not rebuild:
                logger.info(f"Loading snapshot {snapshot_path}")
                return read_snapshot(snapshot_path, self.config.snapshot)

            if source is None:
                raise ValueError("No snapshot available and no source document given")

            return self.build(source, snapshot_path)
        except TOSMError as e:
            logger.error(f"Map load failed at stage '{e.stage}': {e}")
            raise

    def build(self, source: PathLike, snapshot: Optional[PathLike] = None) -> IndexedMap:
        """Parse and index a source document, writing a snapshot if a path is given"""
        logger.info(f"Building map index from {source}")
        indexed_map = self.loader.load_file(source)

        if snapshot:
            write_snapshot(indexed_map, snapshot, self.config.snapshot)

        return indexed_map
