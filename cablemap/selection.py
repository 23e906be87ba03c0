"""Single active route selection."""

from __future__ import annotations

import logging
from typing import Optional

from cablemap import config
from cablemap.layers import RouteLayer
from cablemap.surface import MapSurface

logger = logging.getLogger(__name__)


class SelectionTracker:
    """Idle, or Selected(layer). At most one layer wears the highlight.

    This is the only place that applies or removes the highlight style.
    """

    def __init__(self, surface: MapSurface) -> None:
        self.surface = surface
        self._selected: Optional[RouteLayer] = None

    @property
    def selected(self) -> Optional[RouteLayer]:
        return self._selected

    @property
    def is_idle(self) -> bool:
        return self._selected is None

    def select(self, layer: RouteLayer) -> None:
        prev = self._selected
        if prev is not None and prev is not layer:
            prev.reset_style()
        layer.set_style(config.HIGHLIGHT_STYLE)
        self.surface.bring_to_front(layer)
        self._selected = layer
        logger.debug("Selected route for connection %s", layer.connection_id)

    def clear(self) -> None:
        prev = self._selected
        if prev is None:
            return
        prev.reset_style()
        self._selected = None
        logger.debug("Cleared selection of connection %s", prev.connection_id)
