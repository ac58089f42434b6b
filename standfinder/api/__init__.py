"""
API module for StandFinder.

Provides REST endpoints for:
- Stand resolution and per-airport stand listings
- Airport reference data
- Crowdsourced stand reports
"""

from standfinder.api.stands import stands_bp
from standfinder.api.airports import airports_bp
from standfinder.api.crowdsource import crowdsource_bp

__all__ = ['stands_bp', 'airports_bp', 'crowdsource_bp']
