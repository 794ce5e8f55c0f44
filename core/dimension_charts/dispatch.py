"""Render dispatch across every registered dimension panel."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Protocol

from analysis.render_config import RenderConfig

from .registry import DimensionPanel, PanelRegion


class Renderer(Protocol):
    """Charting primitive that draws one dimension's comparison chart."""

    def __call__(self, plot: PanelRegion, tooltip: PanelRegion, config: RenderConfig) -> Any: ...


@dataclass(frozen=True, slots=True)
class PanelRender:
    """One renderer invocation made by `dispatch_all`."""

    panel: DimensionPanel
    config: RenderConfig
    result: Any


def dispatch_all(
    panels: Mapping[str, DimensionPanel],
    base_config: RenderConfig,
    *,
    renderer: Renderer,
    titles: MutableMapping[str, str] | None = None,
) -> list[PanelRender]:
    """Render every panel exactly once with its own copy of the base config.

    Renderer exceptions are not caught: a failure aborts the remaining panels.

    Args:
        panels: Registry of complete panels.
        base_config: Shared config; never mutated.
        renderer: Charting primitive called as `renderer(plot, tooltip, config)`.
        titles: Title text per dimension (the title region's content).

    Returns:
        The renderer invocations, in panel order.
    """

    renders: list[PanelRender] = []
    for dimension, panel in panels.items():
        config = base_config.for_panel(dimension=dimension, legend_container=panel.legend)
        if titles is not None:
            titles[dimension] = dimension
        result = renderer(panel.plot, panel.tooltip, config)  # type: ignore[arg-type]
        renders.append(PanelRender(panel=panel, config=config, result=result))
    return renders
