"""
Flight identifier parsing.

Turns free-text identifiers into airline code + number components:
- IATA flight number: BA1489 (2-letter airline code)
- ICAO callsign: BAW1489 (3-letter airline code)

Everything here is pure and never raises.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

# Airline code + 1-4 digits + optional suffix letter
FLIGHT_PATTERN = re.compile(r'^([A-Z]{2,3})(\d{1,4}[A-Z]?)$')

# Common ICAO to IATA airline mappings
ICAO_TO_IATA: Dict[str, str] = {
    'AAL': 'AA',  # American Airlines
    'DAL': 'DL',  # Delta
    'UAL': 'UA',  # United
    'SWA': 'WN',  # Southwest
    'JBU': 'B6',  # JetBlue
    'ASA': 'AS',  # Alaska
    'FFT': 'F9',  # Frontier
    'NKS': 'NK',  # Spirit
    'ACA': 'AC',  # Air Canada
    'WJA': 'WS',  # WestJet
    'BAW': 'BA',  # British Airways
    'VIR': 'VS',  # Virgin Atlantic
    'DLH': 'LH',  # Lufthansa
    'AFR': 'AF',  # Air France
    'KLM': 'KL',  # KLM
    'UAE': 'EK',  # Emirates
    'QTR': 'QR',  # Qatar
    'ETD': 'EY',  # Etihad
    'QFA': 'QF',  # Qantas
    'ANA': 'NH',  # All Nippon
    'JAL': 'JL',  # Japan Airlines
    'CPA': 'CX',  # Cathay Pacific
    'SIA': 'SQ',  # Singapore
    'RYR': 'FR',  # Ryanair
    'EZY': 'U2',  # easyJet
    'SKW': 'OO',  # SkyWest
    'RPA': 'YX',  # Republic
    'ENY': 'MQ',  # Envoy
    'FDX': 'FX',  # FedEx
    'UPS': '5X',  # UPS
}

IATA_TO_ICAO: Dict[str, str] = {iata: icao for icao, iata in ICAO_TO_IATA.items()}

AIRLINE_NAMES: Dict[str, str] = {
    'AAL': 'American Airlines', 'DAL': 'Delta Air Lines', 'UAL': 'United Airlines',
    'SWA': 'Southwest Airlines', 'JBU': 'JetBlue Airways', 'ASA': 'Alaska Airlines',
    'FFT': 'Frontier Airlines', 'NKS': 'Spirit Airlines', 'ACA': 'Air Canada',
    'WJA': 'WestJet', 'BAW': 'British Airways', 'VIR': 'Virgin Atlantic',
    'DLH': 'Lufthansa', 'AFR': 'Air France', 'KLM': 'KLM Royal Dutch',
    'UAE': 'Emirates', 'QTR': 'Qatar Airways', 'ETD': 'Etihad Airways',
    'QFA': 'Qantas', 'ANA': 'All Nippon Airways', 'JAL': 'Japan Airlines',
    'CPA': 'Cathay Pacific', 'SIA': 'Singapore Airlines', 'RYR': 'Ryanair',
    'EZY': 'easyJet', 'SKW': 'SkyWest Airlines', 'RPA': 'Republic Airways',
    'ENY': 'Envoy Air', 'FDX': 'FedEx Express', 'UPS': 'UPS Airlines',
}


@dataclass(frozen=True)
class ParsedFlightNumber:
    """Components extracted from a raw flight identifier."""
    flight_number: Optional[str] = None
    callsign: Optional[str] = None
    airline_icao: Optional[str] = None
    airline_iata: Optional[str] = None


def convert_icao_to_iata(icao: str) -> str:
    """
    Convert an ICAO airline code to its IATA code.

    Unknown codes fall back to their first two characters.
    """
    return ICAO_TO_IATA.get(icao, icao[:2])


def convert_iata_to_icao(iata: Optional[str]) -> Optional[str]:
    """Convert an IATA airline code to ICAO, or None if not a known airline."""
    if not iata:
        return None
    return IATA_TO_ICAO.get(iata.upper())


def airline_name(icao: Optional[str]) -> Optional[str]:
    """Human-readable airline name for an ICAO code, if known."""
    if not icao:
        return None
    return AIRLINE_NAMES.get(icao.upper())


def normalize_flight_number(identifier: str) -> ParsedFlightNumber:
    """
    Parse a flight number or callsign.

    Examples:
    - 'BA1489'  -> flight_number='BA1489', airline_iata='BA'
    - 'baw1489' -> callsign='BAW1489', airline_icao='BAW', flight_number='BA1489'
    - 'N123AB'  -> callsign='N123AB' (no airline)
    """
    cleaned = (identifier or '').strip().upper()

    match = FLIGHT_PATTERN.match(cleaned)
    if not match:
        return ParsedFlightNumber(callsign=cleaned)

    airline, number = match.groups()

    if len(airline) == 2:
        return ParsedFlightNumber(
            flight_number=f'{airline}{number}',
            airline_iata=airline,
        )

    return ParsedFlightNumber(
        callsign=f'{airline}{number}',
        flight_number=f'{convert_icao_to_iata(airline)}{number}',
        airline_icao=airline,
    )


def normalize_stand_name(stand_name: str) -> str:
    """
    Normalize stand labels to a canonical form.

    'A10', 'A010', 'A-10', 'Gate A10' and 'stand a10' all become 'A10'.
    """
    cleaned = stand_name.strip().upper()
    cleaned = re.sub(r'^(GATE|STAND)\s*', '', cleaned)
    cleaned = cleaned.replace('-', '').replace(' ', '')
    # Drop zero padding on the numeric part (A010 -> A10, 007 -> 7)
    cleaned = re.sub(r'^([A-Z]*)0+(?=\d)', r'\1', cleaned)
    return cleaned
