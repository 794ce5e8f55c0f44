"""Pure analysis package for metricBoard.

This package contains deterministic, testable computations for the dimension
time-series dashboard: browser location codecs, time-unit conversion, series
selection and render configuration. It must not import Django.
"""

from .render_config import RenderConfig, SideControls, derive_config
from .series_filter import Series, top_series

__all__ = ["RenderConfig", "Series", "SideControls", "derive_config", "top_series"]
