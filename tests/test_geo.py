import pytest

from rugguesser.services.geo import (
    Coordinate,
    InvalidCoordinate,
    distance_km,
    score_from_distance,
)

POINTS = [
    Coordinate(0.0, 0.0),
    Coordinate(38.68, 29.41),
    Coordinate(-33.87, 151.21),
    Coordinate(89.9, -45.0),
    Coordinate(-89.9, 179.9),
    Coordinate(35.71, -109.54),
]


@pytest.mark.parametrize('point', POINTS)
def test_distance_to_self_is_zero(point):
    assert distance_km(point, point) == 0.0


def test_distance_is_symmetric():
    for a in POINTS:
        for b in POINTS:
            assert distance_km(a, b) == distance_km(b, a)


def test_quarter_great_circle():
    assert distance_km(Coordinate(0, 0), Coordinate(0, 90)) == pytest.approx(10007.5, abs=0.1)


def test_antipodal_points_stay_finite():
    assert distance_km(Coordinate(0, 0), Coordinate(0, 180)) == pytest.approx(20015.1, abs=0.1)
    assert distance_km(Coordinate(90, 0), Coordinate(-90, 0)) == pytest.approx(20015.1, abs=0.1)


def test_signed_longitude_difference_across_antimeridian():
    # 179E to 179W is a 358 degree signed difference; the haversine still
    # lands on the 2 degree arc because sin^2 is periodic.
    assert distance_km(Coordinate(0, 179), Coordinate(0, -179)) == pytest.approx(222.39, abs=0.01)


def test_score_at_reference_distances():
    assert score_from_distance(0) == 5000
    assert score_from_distance(2000) == 1839
    assert score_from_distance(20000) == 0


def test_score_is_monotonic_and_bounded():
    scores = [score_from_distance(d) for d in range(0, 20001, 250)]
    assert scores == sorted(scores, reverse=True)
    assert all(0 <= s <= 5000 for s in scores)


def test_negative_distance_counts_as_zero():
    assert score_from_distance(-10) == 5000


def test_parse_coordinate():
    assert Coordinate.parse({'lat': '12.5', 'lng': -3}) == Coordinate(12.5, -3.0)


@pytest.mark.parametrize('payload', [
    None,
    [],
    {'lat': 10},
    {'lat': 'north', 'lng': 0},
    {'lat': 91, 'lng': 0},
    {'lat': 0, 'lng': -180.5},
    {'lat': float('nan'), 'lng': 0},
])
def test_parse_rejects_invalid_payloads(payload):
    with pytest.raises(InvalidCoordinate):
        Coordinate.parse(payload)
