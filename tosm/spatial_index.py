"""
Spatial indexing for nearest-node queries

Bucketed k-d tree over (lat, lon) points. Leaves hold up to
``bucket_capacity`` points; a full leaf splits on its widest dimension.
Queries run best-first over node bounding boxes with a caller supplied
distance function, so the same tree serves haversine or planar metrics.
"""

import heapq
import itertools
import math
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from .config import get_config
from .exceptions import SpatialIndexError

Point = Tuple[float, ...]
DistanceFn = Callable[[Sequence[float], Sequence[float]], float]
BoxDistanceFn = Callable[[Sequence[float], Sequence[float], Sequence[float]], float]


class _KdNode:
    """Tree node; a leaf while ``split_dim`` is None"""
    __slots__ = (
        "points", "values", "seqs",
        "min_bounds", "max_bounds",
        "split_dim", "split_value", "left", "right",
    )

    def __init__(self, dimensions: int):
        self.points: List[Point] = []
        self.values: List[Any] = []
        self.seqs: List[int] = []
        self.min_bounds = [math.inf] * dimensions
        self.max_bounds = [-math.inf] * dimensions
        self.split_dim: Optional[int] = None
        self.split_value: float = 0.0
        self.left: Optional["_KdNode"] = None
        self.right: Optional["_KdNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.split_dim is None

    def extend_bounds(self, point: Point):
        for dim, coord in enumerate(point):
            if coord < self.min_bounds[dim]:
                self.min_bounds[dim] = coord
            if coord > self.max_bounds[dim]:
                self.max_bounds[dim] = coord

    def add(self, point: Point, value: Any, seq: int):
        self.extend_bounds(point)
        self.points.append(point)
        self.values.append(value)
        self.seqs.append(seq)


class SpatialIndex:
    """
    K-d tree mapping points to payload values

    Usage:
        index = SpatialIndex()
        index.insert([64.2, -21.9], 2)
        index.nearest([64.14, -21.94], 1, haversine)  # [(distance_km, 2)]
    """

    def __init__(self, dimensions: int = 2, bucket_capacity: Optional[int] = None):
        if bucket_capacity is None:
            bucket_capacity = get_config().index.bucket_capacity
        if dimensions < 1:
            raise ValueError(f"dimensions must be at least 1, got {dimensions}")
        if bucket_capacity < 1:
            raise ValueError(f"bucket_capacity must be at least 1, got {bucket_capacity}")

        self.dimensions = dimensions
        self.bucket_capacity = bucket_capacity
        self._root = _KdNode(dimensions)
        self._entries: List[Tuple[Point, Any]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpatialIndex):
            return NotImplemented
        return self.dimensions == other.dimensions and self._entries == other._entries

    def __repr__(self) -> str:
        return f"SpatialIndex(dimensions={self.dimensions}, size={len(self)})"

    def entries(self) -> Iterator[Tuple[Point, Any]]:
        """(point, value) pairs in insertion order"""
        return iter(self._entries)

    def insert(self, point: Sequence[float], value: Any):
        """
        Insert a point with its payload

        Raises:
            SpatialIndexError: wrong number of coordinates or a coordinate
                that is not a finite number
        """
        key = self._check_point(point)
        seq = len(self._entries)
        self._entries.append((key, value))

        node = self._root
        while not node.is_leaf:
            node.extend_bounds(key)
            node = node.left if key[node.split_dim] <= node.split_value else node.right

        node.add(key, value, seq)
        if len(node.points) > self.bucket_capacity:
            self._split(node)

    def nearest(
        self,
        point: Sequence[float],
        k: int,
        distance_fn: DistanceFn,
        box_distance_fn: Optional[BoxDistanceFn] = None
    ) -> List[Tuple[float, Any]]:
        """
        Find the k entries closest to a point

        Args:
            point: Query point
            k: Number of results wanted, clamped to the index size
            distance_fn: Metric between two points
            box_distance_fn: Lower bound of the metric between a point and
                a (min_corner, max_corner) box. Without one no subtree is
                pruned, which is exact for any metric but visits every leaf.

        Returns:
            (distance, value) pairs sorted by distance, equal distances
            in insertion order
        """
        if k <= 0 or not self._entries:
            return []
        k = min(k, len(self._entries))

        if box_distance_fn is None:
            box_distance_fn = _no_box_distance

        # Max-heap of the best k so far, keyed on (distance, insertion seq)
        best: List[Tuple[float, int, Any]] = []
        tiebreak = itertools.count()
        pending = [(0.0, next(tiebreak), self._root)]

        while pending:
            bound, _, node = heapq.heappop(pending)
            if len(best) == k and bound > -best[0][0]:
                break

            if node.is_leaf:
                for candidate, value, seq in zip(node.points, node.values, node.seqs):
                    dist = distance_fn(point, candidate)
                    if len(best) < k:
                        heapq.heappush(best, (-dist, -seq, value))
                    elif (dist, seq) < (-best[0][0], -best[0][1]):
                        heapq.heapreplace(best, (-dist, -seq, value))
                continue

            for child in (node.left, node.right):
                child_bound = box_distance_fn(point, child.min_bounds, child.max_bounds)
                if len(best) < k or child_bound <= -best[0][0]:
                    heapq.heappush(pending, (child_bound, next(tiebreak), child))

        ranked = sorted((-neg_dist, -neg_seq, value) for neg_dist, neg_seq, value in best)
        return [(dist, value) for dist, _, value in ranked]

    def _check_point(self, point: Sequence[float]) -> Point:
        try:
            key = tuple(float(coord) for coord in point)
        except (TypeError, ValueError) as e:
            raise SpatialIndexError(f"Point {point!r} is not a sequence of numbers") from e

        if len(key) != self.dimensions:
            raise SpatialIndexError(
                f"Point {point!r} has {len(key)} coordinates, expected {self.dimensions}"
            )
        if not all(math.isfinite(coord) for coord in key):
            raise SpatialIndexError(f"Point {point!r} has a non-finite coordinate")
        return key

    def _split(self, node: _KdNode):
        """Turn an overfull leaf into an inner node with two leaves"""
        spreads = [hi - lo for lo, hi in zip(node.min_bounds, node.max_bounds)]
        split_dim = max(range(self.dimensions), key=lambda dim: spreads[dim])
        if spreads[split_dim] <= 0.0:
            # All points identical, nothing to split on
            return

        low = node.min_bounds[split_dim]
        split_value = low + spreads[split_dim] / 2.0
        if split_value >= node.max_bounds[split_dim]:
            # Adjacent floats: keep the lower one on the left
            split_value = low

        left = _KdNode(self.dimensions)
        right = _KdNode(self.dimensions)
        for point, value, seq in zip(node.points, node.values, node.seqs):
            target = left if point[split_dim] <= split_value else right
            target.add(point, value, seq)

        node.points, node.values, node.seqs = [], [], []
        node.split_dim = split_dim
        node.split_value = split_value
        node.left = left
        node.right = right


def _no_box_distance(point, min_corner, max_corner) -> float:
    return 0.0


def clamped_box_distance(distance_fn: DistanceFn) -> BoxDistanceFn:
    """
    Box bound from the metric at the query point clamped into the box

    Only a lower bound for planar metrics such as Euclidean distance. On a
    sphere the closest point of a box is not the clamped one, so haversine
    queries use ``geo.haversine_to_box`` instead.
    """
    def box_distance(point, min_corner, max_corner):
        clamped = [
            min(hi, max(lo, coord))
            for coord, lo, hi in zip(point, min_corner, max_corner)
        ]
        return distance_fn(point, clamped)
    return box_distance
