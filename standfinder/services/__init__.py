"""
Services module for StandFinder.

- StandResolutionEngine: flight -> most likely parking stand
"""

from standfinder.services.stand_resolution import StandResolutionEngine

__all__ = ['StandResolutionEngine']
