"""
Exception types

Every failure carries the stage that raised it so callers can tell a bad
source document from a damaged snapshot.
"""


class TOSMError(RuntimeError):
    """Base class for all map index failures"""
    stage = "unknown"
    
    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class DocumentError(TOSMError):
    """Source document could not be read or is malformed"""
    stage = "parse"


class DuplicateIdError(DocumentError):
    """Two nodes or two ways share an id and duplicates are rejected"""


class SpatialIndexError(TOSMError, ValueError):
    """A point could not be inserted into the spatial index"""
    stage = "index"


class SnapshotError(TOSMError):
    """Base class for snapshot read/write failures"""
    stage = "snapshot"


class SnapshotIOError(SnapshotError):
    """Snapshot file could not be opened, read or written"""
    stage = "io"


class SnapshotDecompressionError(SnapshotError):
    """Compressed stream is corrupted or truncated"""
    stage = "decompress"


class SnapshotDecodeError(SnapshotError):
    """Decompressed bytes do not match the snapshot layout"""
    stage = "decode"
