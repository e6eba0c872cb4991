"""Tests for the k-d tree spatial index."""

import math
import random

import pytest

from tosm.exceptions import SpatialIndexError
from tosm.geo import haversine, haversine_to_box
from tosm.spatial_index import SpatialIndex, clamped_box_distance


def euclidean(a, b):
    return math.hypot(a[0] - b[0], a[1] - b[1])


def brute_force(points, query, k, distance_fn):
    ranked = sorted(
        ((distance_fn(query, point), seq, value) for seq, (point, value) in enumerate(points)),
    )
    return [(dist, value) for dist, _, value in ranked[:k]]


@pytest.fixture
def random_points():
    rng = random.Random(42)
    return [((rng.uniform(63.0, 66.5), rng.uniform(-24.5, -13.5)), node_id)
            for node_id in range(1, 601)]


def build(points, bucket_capacity=4):
    index = SpatialIndex(bucket_capacity=bucket_capacity)
    for point, value in points:
        index.insert(point, value)
    return index


def test_empty_index_returns_nothing():
    index = SpatialIndex()
    assert len(index) == 0
    assert index.nearest((64.0, -21.0), 5, haversine) == []


def test_zero_k_returns_nothing():
    index = build([((64.0, -21.0), 1)])
    assert index.nearest((64.0, -21.0), 0, haversine) == []


def test_k_is_clamped_to_size():
    index = build([((64.0, -21.0), 1), ((64.2, -21.9), 2)])
    result = index.nearest((64.1, -21.5), 10, haversine)
    assert sorted(value for _, value in result) == [1, 2]
    assert len(result) == 2


@pytest.mark.parametrize("point", [
    (float("nan"), 0.0),
    (0.0, float("inf")),
    (float("-inf"), float("-inf")),
])
def test_non_finite_point_is_rejected(point):
    index = SpatialIndex()
    with pytest.raises(SpatialIndexError):
        index.insert(point, 1)
    assert len(index) == 0


def test_wrong_dimension_is_rejected():
    index = SpatialIndex()
    with pytest.raises(SpatialIndexError):
        index.insert((1.0, 2.0, 3.0), 1)
    with pytest.raises(SpatialIndexError):
        index.insert(("north", 2.0), 1)


def test_spatial_index_error_is_value_error():
    with pytest.raises(ValueError):
        SpatialIndex().insert((float("nan"), 1.0), 1)


@pytest.mark.parametrize("k", [1, 3, 10])
def test_haversine_nearest_matches_brute_force(random_points, k):
    index = build(random_points)
    rng = random.Random(3)
    for _ in range(50):
        query = (rng.uniform(62.0, 67.5), rng.uniform(-26.0, -12.0))
        expected = brute_force(random_points, query, k, haversine)
        result = index.nearest(query, k, haversine, box_distance_fn=haversine_to_box)
        assert [value for _, value in result] == [value for _, value in expected]
        for (dist, _), (expected_dist, _) in zip(result, expected):
            assert dist == pytest.approx(expected_dist)


def test_clamped_box_bound_with_euclidean_metric(random_points):
    index = build(random_points, bucket_capacity=8)
    rng = random.Random(5)
    for _ in range(50):
        query = (rng.uniform(62.0, 67.5), rng.uniform(-26.0, -12.0))
        expected = brute_force(random_points, query, 5, euclidean)
        result = index.nearest(query, 5, euclidean, box_distance_fn=clamped_box_distance(euclidean))
        assert [value for _, value in result] == [value for _, value in expected]


def test_default_bound_is_exact_across_antimeridian():
    rng = random.Random(11)
    for _ in range(200):
        points = [((rng.uniform(50.0, 85.0), rng.uniform(-180.0, 180.0)), node_id)
                  for node_id in range(200)]
        index = build(points)
        query = (rng.uniform(50.0, 85.0), rng.uniform(-180.0, 180.0))
        expected = brute_force(points, query, 1, haversine)
        assert index.nearest(query, 1, haversine) == expected
        assert index.nearest(query, 1, haversine, box_distance_fn=haversine_to_box) == expected


def test_results_are_sorted_ascending(random_points):
    index = build(random_points)
    result = index.nearest((64.5, -19.0), 25, haversine, box_distance_fn=haversine_to_box)
    distances = [dist for dist, _ in result]
    assert distances == sorted(distances)


def test_equidistant_points_keep_insertion_order():
    index = build([((0.0, 1.0), "east"), ((0.0, -1.0), "west")])
    assert index.nearest((0.0, 0.0), 1, haversine) == [(haversine((0.0, 0.0), (0.0, 1.0)), "east")]
    assert [value for _, value in index.nearest((0.0, 0.0), 2, haversine)] == ["east", "west"]


def test_duplicate_points_keep_insertion_order():
    points = [((64.0, -21.0), value) for value in "abcdefgh"]
    index = build(points, bucket_capacity=2)
    result = index.nearest((64.0, -21.0), 8, haversine)
    assert [value for _, value in result] == list("abcdefgh")
    assert all(dist == 0.0 for dist, _ in result)


def test_same_input_gives_same_answer(random_points):
    first = build(random_points)
    second = build(random_points)
    query = (64.3, -20.1)
    assert first.nearest(query, 7, haversine) == second.nearest(query, 7, haversine)


def test_entries_preserve_insertion_order(random_points):
    index = build(random_points)
    assert [value for _, value in index.entries()] == [value for _, value in random_points]
    assert all(isinstance(point, tuple) for point, _ in index.entries())


def test_replaying_entries_gives_equal_index(random_points):
    index = build(random_points)
    replayed = build(list(index.entries()), bucket_capacity=16)
    assert replayed == index
    assert replayed != build(random_points[:-1])


def test_invalid_construction_arguments():
    with pytest.raises(ValueError):
        SpatialIndex(bucket_capacity=0)
    with pytest.raises(ValueError):
        SpatialIndex(dimensions=0)
