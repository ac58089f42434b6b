"""
Data source registry.

Holds the configured adapters in precedence order. The order matters:
enrichment and position lookups try adapters one at a time in this
order and stop at the first one that answers.
"""

import logging
from typing import Iterable, Iterator, Optional, Tuple

from standfinder.config import AppConfig
from standfinder.sources.adsbexchange import ADSBExchangeAdapter
from standfinder.sources.aviationstack import AviationStackAdapter
from standfinder.sources.base import DataSourceAdapter
from standfinder.sources.opensky import OpenSkyAdapter

logger = logging.getLogger(__name__)


class DataSourceManager:
    """Ordered, read-only collection of data source adapters."""

    def __init__(self, adapters: Iterable[DataSourceAdapter] = ()):
        self._adapters: Tuple[DataSourceAdapter, ...] = tuple(adapters)

    @classmethod
    def from_config(cls, app_config: AppConfig) -> 'DataSourceManager':
        """
        Build the default adapter chain.

        OpenSky is always present (free, no key required); commercial
        providers are added only when their credentials are configured.
        """
        adapters = [OpenSkyAdapter.from_config(app_config.opensky, app_config.sources)]

        if app_config.adsbexchange.is_configured:
            adapters.append(ADSBExchangeAdapter.from_config(app_config.adsbexchange, app_config.sources))

        if app_config.aviationstack.is_configured:
            adapters.append(AviationStackAdapter.from_config(app_config.aviationstack, app_config.sources))

        logger.info(f'Data sources configured: {[a.name for a in adapters]}')
        return cls(adapters)

    def get_adapters(self) -> Tuple[DataSourceAdapter, ...]:
        return self._adapters

    def get_adapter(self, name: str) -> Optional[DataSourceAdapter]:
        for adapter in self._adapters:
            if adapter.name == name:
                return adapter
        return None

    def __iter__(self) -> Iterator[DataSourceAdapter]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)
