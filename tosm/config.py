"""
Configuration settings for the TOSM map index
"""

from dataclasses import dataclass, field


@dataclass
class IndexConfig:
    """Spatial index tuning"""
    # Points held by a k-d tree leaf before it splits
    bucket_capacity: int = 16


@dataclass
class SnapshotConfig:
    """Snapshot file settings"""
    # zstd compression level and window size (log2 bytes)
    compression_level: int = 4
    window_log: int = 21
    
    # Chunk size for streaming reads from the decompressor
    read_size: int = 4096
    
    # Default file suffix for written snapshots
    suffix: str = ".tosm.zst"


@dataclass
class LoaderConfig:
    """Source document loading"""
    # Duplicate node/way ids: False keeps the last occurrence in the lookup
    # maps, True aborts the load
    reject_duplicate_ids: bool = False


@dataclass
class TOSMConfig:
    """Top level configuration"""
    index: IndexConfig = field(default_factory=IndexConfig)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)


# Global config instance
config = TOSMConfig()


def get_config() -> TOSMConfig:
    """Get global configuration"""
    return config


def validate_config(config: TOSMConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []
    
    if config.index is None:
        errors.append("index configuration is required but not set")
    elif config.index.bucket_capacity is None or config.index.bucket_capacity < 1:
        errors.append(f"index.bucket_capacity must be at least 1, got {config.index.bucket_capacity}")
    
    if config.snapshot is None:
        errors.append("snapshot configuration is required but not set")
    else:
        # zstd accepts levels 1-22 and windows of 2^10 to 2^31 bytes
        if not 1 <= config.snapshot.compression_level <= 22:
            errors.append(f"snapshot.compression_level must be between 1 and 22, got {config.snapshot.compression_level}")
        if not 10 <= config.snapshot.window_log <= 31:
            errors.append(f"snapshot.window_log must be between 10 and 31, got {config.snapshot.window_log}")
        if config.snapshot.read_size < 1:
            errors.append(f"snapshot.read_size must be positive, got {config.snapshot.read_size}")
    
    if config.loader is None:
        errors.append("loader configuration is required but not set")
    
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
