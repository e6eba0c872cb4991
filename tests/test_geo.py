"""Tests for great-circle distance helpers."""

import math
import random

import pytest

from tosm.geo import EARTH_RADIUS_KM, haversine, haversine_to_box


POINTS = [
    (0.0, 0.0),
    (64.142257, -21.938559),
    (64.2, -21.9),
    (-33.8688, 151.2093),
    (89.9, 45.0),
    (-90.0, 0.0),
    (51.5074, -0.1276),
]


def test_identity():
    for point in POINTS:
        assert haversine(point, point) == 0.0


def test_symmetry():
    for a in POINTS:
        for b in POINTS:
            assert haversine(a, b) == haversine(b, a)


def test_non_negative_and_finite():
    rng = random.Random(7)
    for _ in range(500):
        a = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        b = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        d = haversine(a, b)
        assert d >= 0.0
        assert math.isfinite(d)


def test_one_degree_on_equator():
    assert haversine((0.0, 0.0), (0.0, 1.0)) == pytest.approx(math.radians(1.0) * EARTH_RADIUS_KM)


def test_antipodal_points_stay_finite():
    d = haversine((0.0, 0.0), (0.0, 180.0))
    assert d == pytest.approx(math.pi * EARTH_RADIUS_KM)
    d = haversine((45.0, 10.0), (-45.0, -170.0))
    assert math.isfinite(d)
    assert d == pytest.approx(math.pi * EARTH_RADIUS_KM)


def test_reykjavik_distance():
    # About 6.6 km between the query point and node 2 of the sample document
    d = haversine((64.142257, -21.938559), (64.2, -21.9))
    assert 6.0 < d < 7.5


def test_box_distance_inside_is_zero():
    assert haversine_to_box((15.0, 5.0), (10.0, 0.0), (20.0, 10.0)) == 0.0


def test_box_distance_same_meridian():
    # Directly north of the box: distance to the top edge
    bound = haversine_to_box((25.0, 5.0), (10.0, 0.0), (20.0, 10.0))
    assert bound == pytest.approx(haversine((25.0, 5.0), (20.0, 5.0)))


def _brute_force_box_distance(point, min_corner, max_corner, steps=400):
    best = math.inf
    for i in range(steps + 1):
        lat = min_corner[0] + (max_corner[0] - min_corner[0]) * i / steps
        lon = min_corner[1] + (max_corner[1] - min_corner[1]) * i / steps
        for edge in ((lat, min_corner[1]), (lat, max_corner[1]),
                     (min_corner[0], lon), (max_corner[0], lon)):
            best = min(best, haversine(point, edge))
    return best


@pytest.mark.parametrize("point", [
    (60.0, 30.0),
    (15.0, 40.0),
    (-20.0, -60.0),
    (80.0, 170.0),
    (12.0, -175.0),
    (-85.0, 100.0),
])
def test_box_distance_is_tight_lower_bound(point):
    min_corner, max_corner = (10.0, 0.0), (20.0, 10.0)
    bound = haversine_to_box(point, min_corner, max_corner)
    brute = _brute_force_box_distance(point, min_corner, max_corner)
    assert bound <= brute + 1e-9
    # Sampling resolution is 0.025 degrees, under 3 km
    assert brute - bound < 3.0


def test_box_distance_never_exceeds_point_distance():
    rng = random.Random(11)
    min_corner, max_corner = (63.9, -22.5), (64.4, -21.5)
    for _ in range(300):
        query = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        inside = (rng.uniform(63.9, 64.4), rng.uniform(-22.5, -21.5))
        assert haversine_to_box(query, min_corner, max_corner) <= haversine(query, inside) + 1e-9
