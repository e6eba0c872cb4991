"""
Snapshot codec

Persists an IndexedMap as a zstd-compressed stream of msgpack objects so it
can be reloaded without re-parsing the source document.

Layout (five consecutive top-level msgpack objects, no header or version):
  1. array of nodes        [id, lat, lon]
  2. array of ways         [id, [node_id, ...], one_way, name | nil]
  3. map node id -> position
  4. map way id -> position
  5. array of index entries [[lat, lon], node_id], in insertion order

Coordinates are written as float64 so bit patterns survive the round trip.
Both directions stream: the encoder writes into the compressor and the
decoder pulls from the decompressor, element by element.
"""

import io
import os
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

import msgpack
import zstandard as zstd
from loguru import logger
from msgpack.exceptions import UnpackException

from .config import SnapshotConfig, get_config
from .dataset.indexed_map import IndexedMap
from .dataset.models import Node, Way
from .dataset.store import DatasetStore
from .exceptions import (
    SnapshotDecodeError,
    SnapshotDecompressionError,
    SnapshotIOError,
    SpatialIndexError,
)
from .models import UINT64_MAX
from .spatial_index import SpatialIndex


# ============================================================
# Encoding
# ============================================================

def encode_snapshot(indexed_map: IndexedMap, stream: BinaryIO) -> None:
    """Write the msgpack layout of an IndexedMap to a binary stream"""
    packer = msgpack.Packer(use_bin_type=True)
    store = indexed_map.store

    stream.write(packer.pack_array_header(len(store.nodes)))
    for node in store.nodes:
        stream.write(packer.pack([node.id, float(node.lat), float(node.lon)]))

    stream.write(packer.pack_array_header(len(store.ways)))
    for way in store.ways:
        stream.write(packer.pack([way.id, list(way.node_ids), bool(way.one_way), way.name]))

    for lookup in (store.node_index, store.way_index):
        stream.write(packer.pack_map_header(len(lookup)))
        for record_id, position in lookup.items():
            stream.write(packer.pack(record_id))
            stream.write(packer.pack(position))

    stream.write(packer.pack_array_header(len(indexed_map.spatial_index)))
    for point, value in indexed_map.spatial_index.entries():
        stream.write(packer.pack([[float(c) for c in point], value]))


# ============================================================
# Decoding
# ============================================================

def _expect_id(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT64_MAX:
        raise SnapshotDecodeError(f"{what}: expected unsigned 64-bit id, got {value!r}")
    return value


def _expect_float(value: Any, what: str) -> float:
    if not isinstance(value, float):
        raise SnapshotDecodeError(f"{what}: expected float64, got {value!r}")
    return value


def _expect_list(value: Any, length: Optional[int], what: str) -> list:
    if not isinstance(value, list) or (length is not None and len(value) != length):
        expected = "array" if length is None else f"array of {length}"
        raise SnapshotDecodeError(f"{what}: expected {expected}, got {value!r}")
    return value


def _decode_node(raw: Any) -> Node:
    node_id, lat, lon = _expect_list(raw, 3, "node")
    node_id = _expect_id(node_id, "node id")
    return Node(
        id=node_id,
        lat=_expect_float(lat, f"node {node_id} lat"),
        lon=_expect_float(lon, f"node {node_id} lon"),
    )


def _decode_way(raw: Any) -> Way:
    way_id, node_ids, one_way, name = _expect_list(raw, 4, "way")
    way_id = _expect_id(way_id, "way id")
    node_ids = tuple(
        _expect_id(node_id, f"way {way_id} node id")
        for node_id in _expect_list(node_ids, None, f"way {way_id} node ids")
    )
    if not isinstance(one_way, bool):
        raise SnapshotDecodeError(f"way {way_id} one_way: expected bool, got {one_way!r}")
    if name is not None and not isinstance(name, str):
        raise SnapshotDecodeError(f"way {way_id} name: expected string or nil, got {name!r}")
    return Way(id=way_id, node_ids=node_ids, one_way=one_way, name=name)


def _decode_lookup(unpacker: msgpack.Unpacker, what: str) -> Dict[int, int]:
    lookup = {}
    for _ in range(unpacker.read_map_header()):
        record_id = _expect_id(unpacker.unpack(), f"{what} key")
        position = unpacker.unpack()
        if isinstance(position, bool) or not isinstance(position, int):
            raise SnapshotDecodeError(f"{what} {record_id}: expected integer position, got {position!r}")
        lookup[record_id] = position
    return lookup


def decode_snapshot(stream: BinaryIO) -> IndexedMap:
    """
    Rebuild an IndexedMap from a stream holding the msgpack layout

    Raises:
        SnapshotDecodeError: If the stream is truncated, has trailing data,
            or does not match the layout
    """
    unpacker = msgpack.Unpacker(stream, raw=False, strict_map_key=False)
    store = DatasetStore()
    spatial_index = SpatialIndex()

    try:
        store.nodes = [_decode_node(unpacker.unpack()) for _ in range(unpacker.read_array_header())]
        store.ways = [_decode_way(unpacker.unpack()) for _ in range(unpacker.read_array_header())]
        store.node_index = _decode_lookup(unpacker, "node index")
        store.way_index = _decode_lookup(unpacker, "way index")

        for _ in range(unpacker.read_array_header()):
            point, value = _expect_list(unpacker.unpack(), 2, "index entry")
            point = [_expect_float(c, "index coordinate") for c in _expect_list(point, 2, "index point")]
            spatial_index.insert(point, _expect_id(value, "index value"))

        try:
            unpacker.unpack()
        except msgpack.OutOfData:
            pass
        else:
            raise SnapshotDecodeError("Unexpected trailing data after spatial index")

        store.validate()
    except msgpack.OutOfData as e:
        raise SnapshotDecodeError("Snapshot stream ended early") from e
    except SpatialIndexError as e:
        raise SnapshotDecodeError(f"Invalid spatial index entry: {e}") from e
    except (UnpackException, ValueError, TypeError) as e:
        # msgpack format errors and the store lookup check
        raise SnapshotDecodeError(f"Snapshot does not match the expected layout: {e}") from e

    return IndexedMap(store=store, spatial_index=spatial_index)


# ============================================================
# Compression
# ============================================================

def _compressor(config: SnapshotConfig) -> zstd.ZstdCompressor:
    params = zstd.ZstdCompressionParameters(
        compression_level=config.compression_level,
        window_log=config.window_log,
        write_checksum=1,
    )
    return zstd.ZstdCompressor(compression_params=params)


def dumps(indexed_map: IndexedMap, config: Optional[SnapshotConfig] = None) -> bytes:
    """Compressed snapshot as bytes"""
    config = config or get_config().snapshot
    buffer = io.BytesIO()
    with _compressor(config).stream_writer(buffer, closefd=False) as writer:
        encode_snapshot(indexed_map, writer)
    return buffer.getvalue()


def loads(data: bytes, config: Optional[SnapshotConfig] = None) -> IndexedMap:
    """IndexedMap from compressed snapshot bytes"""
    config = config or get_config().snapshot
    return _decompress_and_decode(io.BytesIO(data), config)


def _decompress_and_decode(source: BinaryIO, config: SnapshotConfig) -> IndexedMap:
    dctx = zstd.ZstdDecompressor()
    try:
        with dctx.stream_reader(source, read_size=config.read_size, closefd=False) as reader:
            return decode_snapshot(reader)
    except zstd.ZstdError as e:
        raise SnapshotDecompressionError(f"Cannot decompress snapshot: {e}") from e


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_snapshot(
    indexed_map: IndexedMap,
    path: Union[str, Path],
    config: Optional[SnapshotConfig] = None
) -> Path:
    """
    Write a compressed snapshot to disk

    Data goes to a temporary file beside the target, renamed into place once
    the compressed frame is complete. The target is never left truncated.

    Raises:
        SnapshotIOError: If the file cannot be written
    """
    config = config or get_config().snapshot
    path = Path(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    except OSError as e:
        raise SnapshotIOError(f"Cannot create snapshot {path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as fh:
            with _compressor(config).stream_writer(fh, closefd=False) as writer:
                encode_snapshot(indexed_map, writer)
        # mkstemp creates 0600; use the mode open() would have given
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException as e:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        if isinstance(e, OSError):
            raise SnapshotIOError(f"Cannot write snapshot {path}: {e}") from e
        raise

    logger.info(f"Saved snapshot to {path} ({path.stat().st_size} bytes, "
                f"{indexed_map.node_count} nodes, {indexed_map.way_count} ways)")
    return path


def read_snapshot(path: Union[str, Path], config: Optional[SnapshotConfig] = None) -> IndexedMap:
    """
    Load an IndexedMap from a compressed snapshot file

    Raises:
        SnapshotIOError: If the file cannot be opened or read
        SnapshotDecompressionError: If the compressed stream is corrupted
        SnapshotDecodeError: If the decompressed data is truncated or malformed.
            A file cut short ends the zstd stream early without a zstd error,
            so truncation is reported here rather than as a decompression error.
    """
    config = config or get_config().snapshot

    try:
        with open(path, "rb") as fh:
            indexed_map = _decompress_and_decode(fh, config)
    except OSError as e:
        raise SnapshotIOError(f"Cannot read snapshot {path}: {e}") from e

    logger.info(f"Loaded snapshot {path}: {indexed_map.node_count} nodes, {indexed_map.way_count} ways")
    return indexed_map
