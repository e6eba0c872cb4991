#!/usr/bin/env python
"""
Command-line interface for the TOSM map index

Usage:
    python cli.py build --input iceland.json --output iceland.tosm.zst
    python cli.py nearest --snapshot iceland.tosm.zst --lat 64.142257 --lon -21.938559
"""

import os
import sys
import json
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from loguru import logger
from tosm import MapPipeline, TOSMError, get_config, validate_config


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def cmd_build(args):
    """Build a snapshot from a source document"""
    setup_logging(args.verbose)

    output_path = args.output or os.path.splitext(args.input)[0] + get_config().snapshot.suffix

    pipeline = MapPipeline()
    try:
        indexed_map = pipeline.build(args.input, output_path)
    except TOSMError as e:
        logger.error(f"Build failed at stage '{e.stage}': {e}")
        return 1

    logger.info(f"✓ Generated: {output_path}")
    logger.info(f"  Nodes: {indexed_map.node_count}")
    logger.info(f"  Ways: {indexed_map.way_count}")
    return 0


def cmd_nearest(args):
    """Query the nodes nearest to a coordinate"""
    setup_logging(args.verbose)

    if not args.snapshot and not args.input:
        logger.error("Either --snapshot or --input is required")
        return 1

    pipeline = MapPipeline()
    try:
        indexed_map = pipeline.run(source=args.input, snapshot=args.snapshot)
    except TOSMError:
        # Stage already logged by the pipeline
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1

    results = []
    for distance_km, node_id in indexed_map.nearest(args.lat, args.lon, args.k):
        node = indexed_map.get_node(node_id)
        results.append({
            "node_id": node_id,
            "distance_km": distance_km,
            "lat": node.lat if node else None,
            "lon": node.lon if node else None,
        })

    print(json.dumps(results, indent=2))
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="TOSM map index CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Build a snapshot:
    python cli.py build --input iceland.json --output iceland.tosm.zst

  Nearest nodes from a snapshot:
    python cli.py nearest --snapshot iceland.tosm.zst --lat 64.142257 --lon -21.938559 -k 3

  Nearest nodes straight from a source document:
    python cli.py nearest --input iceland.json --lat 64.142257 --lon -21.938559
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Build command
    build_parser = subparsers.add_parser("build", help="Build a snapshot from a source JSON document")
    build_parser.add_argument("--input", "-i", required=True, help="Source JSON document")
    build_parser.add_argument("--output", "-o", help="Snapshot file (default: input name with snapshot suffix)")
    build_parser.set_defaults(func=cmd_build)

    # Nearest command
    nearest_parser = subparsers.add_parser("nearest", help="Find the nodes nearest to a coordinate")
    nearest_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    nearest_parser.add_argument("--lon", type=float, required=True, help="Longitude")
    nearest_parser.add_argument("-k", type=int, default=1, help="Number of nodes to return")
    nearest_parser.add_argument("--snapshot", "-s", help="Snapshot file")
    nearest_parser.add_argument("--input", "-i", help="Source JSON document (used when no snapshot exists)")
    nearest_parser.set_defaults(func=cmd_nearest)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    validate_config(get_config())
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
