"""
External flight data sources.

Each adapter wraps one provider's REST API behind the same two-method
contract (see base.DataSourceAdapter); DataSourceManager holds them in
precedence order.
"""

from standfinder.sources.base import DataSourceAdapter
from standfinder.sources.opensky import OpenSkyAdapter
from standfinder.sources.adsbexchange import ADSBExchangeAdapter
from standfinder.sources.aviationstack import AviationStackAdapter
from standfinder.sources.manager import DataSourceManager

__all__ = [
    'DataSourceAdapter',
    'OpenSkyAdapter',
    'ADSBExchangeAdapter',
    'AviationStackAdapter',
    'DataSourceManager',
]
