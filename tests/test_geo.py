"""Tests for distance and aircraft size helpers."""

import pytest

from standfinder.geo import calculate_distance, get_aircraft_size_code, matches_aircraft_size


def test_distance_to_self_is_zero():
    assert calculate_distance(51.4720, -0.4880, 51.4720, -0.4880) == 0.0


def test_distance_is_symmetric():
    a = (51.4720, -0.4880)
    b = (50.0379, 8.5622)

    assert calculate_distance(*a, *b) == pytest.approx(calculate_distance(*b, *a))


def test_distance_heathrow_to_frankfurt():
    # Roughly 655 km great-circle
    assert calculate_distance(51.4700, -0.4543, 50.0379, 8.5622) == pytest.approx(655_000, rel=0.01)


def test_one_degree_of_latitude():
    assert calculate_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-4)


@pytest.mark.parametrize("wingspan,stand_max,fits", [
    (35.8, 36.0, True),
    (36.0, 36.0, True),
    (64.8, 36.0, False),
    (79.8, None, True),
    (0.0, 24.0, True),
])
def test_matches_aircraft_size(wingspan, stand_max, fits):
    assert matches_aircraft_size(wingspan, stand_max) is fits


@pytest.mark.parametrize("wingspan,code", [
    (11.0, 'A'),
    (15.0, 'B'),
    (35.8, 'C'),
    (36.0, 'D'),
    (64.8, 'E'),
    (79.8, 'F'),
])
def test_aircraft_size_code(wingspan, code):
    assert get_aircraft_size_code(wingspan) == code
