"""Tests for flight identifier and stand name normalization."""

import pytest

from standfinder.flight_ids import (
    ParsedFlightNumber,
    airline_name,
    convert_iata_to_icao,
    convert_icao_to_iata,
    normalize_flight_number,
    normalize_stand_name,
)


class TestNormalizeFlightNumber:
    def test_iata_flight_number(self):
        assert normalize_flight_number('BA1489') == ParsedFlightNumber(
            flight_number='BA1489',
            airline_iata='BA',
        )

    def test_icao_callsign(self):
        assert normalize_flight_number('BAW1489') == ParsedFlightNumber(
            flight_number='BA1489',
            callsign='BAW1489',
            airline_icao='BAW',
        )

    def test_trims_and_uppercases(self):
        parsed = normalize_flight_number('  ezy42a ')

        assert parsed.callsign == 'EZY42A'
        assert parsed.flight_number == 'U242A'
        assert parsed.airline_icao == 'EZY'

    def test_unknown_icao_prefix_falls_back_to_first_two_letters(self):
        parsed = normalize_flight_number('XYZ77')

        assert parsed.flight_number == 'XY77'
        assert parsed.airline_icao == 'XYZ'

    @pytest.mark.parametrize("identifier", ['N123AB', 'BA', '12345', 'BAW12345'])
    def test_unrecognized_identifier_is_callsign_only(self, identifier):
        parsed = normalize_flight_number(identifier)

        assert parsed == ParsedFlightNumber(callsign=identifier)

    def test_empty_input_never_raises(self):
        assert normalize_flight_number('') == ParsedFlightNumber(callsign='')
        assert normalize_flight_number(None) == ParsedFlightNumber(callsign='')

    def test_deterministic(self):
        assert normalize_flight_number('DLH400') == normalize_flight_number('DLH400')


def test_airline_code_conversion():
    assert convert_icao_to_iata('BAW') == 'BA'
    assert convert_icao_to_iata('QQQ') == 'QQ'
    assert convert_iata_to_icao('u2') == 'EZY'
    assert convert_iata_to_icao('QQ') is None
    assert convert_iata_to_icao(None) is None


def test_airline_name():
    assert airline_name('baw') == 'British Airways'
    assert airline_name('QQQ') is None


@pytest.mark.parametrize("raw,expected", [
    ('A10', 'A10'),
    ('A010', 'A10'),
    ('A-10', 'A10'),
    ('Gate A010', 'A10'),
    ('stand a10', 'A10'),
    ('515', '515'),
    ('007', '7'),
    ('B 32', 'B32'),
])
def test_normalize_stand_name(raw, expected):
    assert normalize_stand_name(raw) == expected
