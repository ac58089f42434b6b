"""
Exceptions raised by the stand resolution pipeline.

Only InputValidationError and UnresolvedError ever reach a caller of
StandResolutionEngine. AdapterError and CacheError are raised and
absorbed internally (at the adapter boundary and inside StandCache).
"""


class StandFinderError(Exception):
    """Base exception for all StandFinder errors."""
    pass


class InputValidationError(StandFinderError):
    """Raised when a request carries no usable flight identifier."""
    def __init__(self, message: str = ''):
        self.message = message or 'Flight number or callsign required'
        super().__init__(self.message)


class UnresolvedError(StandFinderError):
    """Raised when every fallback stage came back without a candidate."""
    def __init__(self, flight_number: str = '', airport: str = ''):
        self.flight_number = flight_number
        self.airport = airport
        self.message = f"Unable to resolve stand for flight '{flight_number}'"
        if airport:
            self.message += f' at {airport}'
        super().__init__(self.message)


class AdapterError(StandFinderError):
    """Raised inside a data source adapter when an external call fails."""
    def __init__(self, source: str, message: str = '', status_code: int = None):
        self.source = source
        self.status_code = status_code
        self.message = message or f'{source} request failed'
        super().__init__(self.message)


class CacheError(StandFinderError):
    """Raised by the shared cache tier when the backing store fails."""
    def __init__(self, operation: str, key: str = '', message: str = ''):
        self.operation = operation
        self.key = key
        self.message = message or f'Shared cache {operation} failed'
        super().__init__(self.message)
