"""Chart.js payload rendering for dimension comparison panels."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, TypedDict

from analysis.render_config import RenderConfig
from analysis.series_filter import Series

from .registry import PanelRegion

PALETTE = (
    "#3366CC",
    "#DC3912",
    "#FF9900",
    "#109618",
    "#990099",
    "#0099C6",
    "#DD4477",
    "#66AA00",
)


class ChartPoint(TypedDict):
    x: float
    y: float | None


class DimensionDataset(TypedDict, total=False):
    """A Chart.js dataset for one series of a dimension panel."""

    label: str
    data: list[ChartPoint]
    dimensions: str
    dimensionNames: str
    borderColor: str
    backgroundColor: str
    borderWidth: int
    pointRadius: int
    pointHoverRadius: int
    tension: float


class DimensionChart(TypedDict):
    """Everything the browser needs to draw one dimension panel."""

    plotId: str | None
    tooltipId: str | None
    legendId: str | None
    dimension: str | None
    mode: str
    datasets: list[DimensionDataset]
    options: dict[str, Any]


class ChartPayloadRenderer:
    """Render dimension panels into Chart.js payloads.

    The renderer is given every dimension's series up front so that `"same"`
    mode can share one y-axis bound across all panels.

    Args:
        series_by_dimension: Candidate series per dimension name.
    """

    def __init__(self, series_by_dimension: Mapping[str, Sequence[Series]]) -> None:
        self.series_by_dimension = series_by_dimension

    def __call__(self, plot: PanelRegion, tooltip: PanelRegion, config: RenderConfig) -> DimensionChart:
        dimension = config.dimension or plot.dimension
        selected = config.filter(list(self.series_by_dimension.get(dimension, ())))
        datasets = [
            _dataset(series, color=PALETTE[index % len(PALETTE)], config=config)
            for index, series in enumerate(selected)
        ]
        legend_id = getattr(config.legend_container, "element_id", None)
        return {
            "plotId": plot.element_id,
            "tooltipId": tooltip.element_id,
            "legendId": legend_id,
            "dimension": dimension,
            "mode": config.mode,
            "datasets": datasets,
            "options": self._options(config, datasets),
        }

    def _options(self, config: RenderConfig, datasets: list[DimensionDataset]) -> dict[str, Any]:
        y_axis: dict[str, Any] = {"beginAtZero": True}
        if config.mode == "same":
            shared_max = self.shared_max(config)
            if shared_max is not None:
                y_axis["suggestedMax"] = shared_max
        elif config.mode == "own":
            local_max = _max_y(datasets)
            if local_max is not None:
                y_axis["suggestedMax"] = local_max

        x_axis: dict[str, Any] = {"type": "linear"}
        if _is_positive(config.aggregate_millis):
            x_axis["ticks"] = {"stepSize": config.aggregate_millis}
        if config.is_overlay:
            x_axis["min"] = 0
            x_axis["max"] = config.window_millis

        options: dict[str, Any] = {
            "scales": {"x": x_axis, "y": y_axis},
            "plugins": {
                "legend": {
                    "display": bool(config.legend),
                    "containerId": getattr(config.legend_container, "element_id", None),
                },
                "tooltip": {"enabled": True},
            },
        }
        if config.is_overlay:
            options["overlay"] = {
                "windowMillis": config.window_millis,
                "windowOffsetMillis": config.window_offset_millis,
            }
        return options

    def shared_max(self, config: RenderConfig) -> float | None:
        """Largest y value drawn by any panel after filtering."""

        values: list[float] = []
        for series_list in self.series_by_dimension.values():
            for series in config.filter(list(series_list)):
                values.extend(y for _, y in series.data if y is not None)
        return max(values) if values else None


def _dataset(series: Series, *, color: str, config: RenderConfig) -> DimensionDataset:
    """Build a dataset dict with consistent styling."""

    points = list(series.data)
    if config.is_overlay and points:
        # Overlay windows are drawn relative to their own start.
        origin = points[0][0]
        points = [(x - origin, y) for x, y in points]
    return {
        "label": series.label or series.dimensions,
        "data": [{"x": x, "y": y} for x, y in points],
        "dimensions": series.dimensions,
        "dimensionNames": series.dimension_names,
        "borderColor": color,
        "backgroundColor": color,
        "borderWidth": 2,
        "pointRadius": 2,
        "pointHoverRadius": 5,
        "tension": 0.15,
    }


def _max_y(datasets: list[DimensionDataset]) -> float | None:
    values = [point["y"] for dataset in datasets for point in dataset.get("data", []) if point["y"] is not None]
    return max(values) if values else None


def _is_positive(value: float) -> bool:
    return not math.isnan(value) and value > 0
