"""Free-text plant name -> light requirement lookup."""

from __future__ import annotations

import time
from collections.abc import Callable

from .catalog import PlantCatalog, PlantLightRequirement, default_catalog, normalize_keyword

DEFAULT_SEARCH_DELAY = 1.0  # seconds of simulated lookup latency


class PlantMatcher:
    """
    Resolve a plant name against a catalog by substring matching.

    Entries are scanned in catalog order and the first keyword that is
    contained in the query, or that contains the query, wins. A query that
    mentions several keywords ("ficus elastica") therefore resolves to the
    earliest one in the catalog ("ficus").
    """

    def __init__(
        self,
        catalog: PlantCatalog | None = None,
        search_delay: float = DEFAULT_SEARCH_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.catalog = catalog if catalog is not None else default_catalog()
        self.search_delay = search_delay
        self._sleep = sleep

    def match(self, query: str) -> PlantLightRequirement | None:
        """Pure lookup; blank queries never match."""
        normalized = normalize_keyword(query or "")
        if not normalized:
            return None
        for keyword, requirement in self.catalog:
            if keyword in normalized or normalized in keyword:
                return requirement
        return None

    def search(self, query: str) -> PlantLightRequirement | None:
        """Lookup preceded by the simulated remote-search latency."""
        if self.search_delay > 0:
            self._sleep(self.search_delay)
        return self.match(query)
