"""Interaction handling for the dimension time-series grid.

Two handlers turn user interaction into address state:

- the mode toggle writes the hash fragment. Hash writes do not navigate, so the
  page re-dispatches every panel itself (`NavigationEffect.SOFT`);
- a chart click writes drill-down selections into the query string. Query
  writes navigate, so the page is rebuilt from the new URL
  (`NavigationEffect.NAVIGATE`).

Handlers run synchronously to completion, including any re-dispatch, before
returning.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from enum import Enum

from analysis.render_config import RenderConfig, SideControls, derive_config
from analysis.series_filter import Series
from analysis.url_state import (
    MODE_HASH_KEY,
    WILDCARD,
    Location,
    encode_dimension_values,
    encode_hash_parameters,
    parse_dimension_values,
    parse_hash_parameters,
    split_query_values,
)

from .dispatch import PanelRender, Renderer, dispatch_all
from .registry import PanelRegistry, build_registry

logger = logging.getLogger(__name__)

ACTIVE_CLASS = "uk-active"


class NavigationEffect(str, Enum):
    """How a location change is applied by the browser."""

    SOFT = "soft"
    NAVIGATE = "navigate"


class StaleNavigationError(RuntimeError):
    """Raised when a page that already navigated away receives an event."""

    def __init__(self, *, href: str) -> None:
        super().__init__(f"Page navigated to {href!r}; build a new page for the new location.")
        self.href = href


@dataclass(frozen=True, slots=True)
class ModeToggleResult:
    """Outcome of a mode toggle click.

    Attributes:
        mode: The new comparison mode.
        active: Whether the toggle control now carries the active class.
        location: Location with the updated hash fragment.
        effect: Always `NavigationEffect.SOFT`.
    """

    mode: str
    active: bool
    location: Location
    effect: NavigationEffect = NavigationEffect.SOFT


@dataclass(frozen=True, slots=True)
class DrillDownResult:
    """Outcome of a chart click: the location to navigate to."""

    dimension_values: dict[str, str]
    location: Location
    effect: NavigationEffect = NavigationEffect.NAVIGATE


def toggle_mode(*, control_active: bool, location: Location) -> ModeToggleResult:
    """Flip between shared (`same`) and independent (`own`) y-axis scales.

    The control's active class is the source of truth for the current mode:
    an active control switches to `same`, an inactive one to `own`.

    Args:
        control_active: Whether the toggle control currently has the active class.
        location: Current browser location.

    Returns:
        ModeToggleResult with the new mode, control state and hash fragment.
    """

    if control_active:
        mode, active = "same", False
    else:
        mode, active = "own", True

    hash_params = parse_hash_parameters(location.fragment)
    hash_params[MODE_HASH_KEY] = mode
    new_location = location.with_fragment(encode_hash_parameters(hash_params))
    logger.debug("Dimension time-series mode toggled to %s", mode)
    return ModeToggleResult(mode=mode, active=active, location=new_location)


def drill_down(*, series: Series, location: Location, control_keys: Collection[str] = ()) -> DrillDownResult:
    """Narrow the dashboard to the clicked series' dimension values.

    Wildcard (`*`) and empty values leave any existing selection for that
    dimension untouched. Query keys named in `control_keys` belong to the side
    panel: they are carried into the new query string but are never treated as
    dimension selections.

    Args:
        series: Clicked series; its `dimensions`/`dimension_names` are JSON text.
        location: Current browser location.
        control_keys: Query keys that are not dimension names.

    Returns:
        DrillDownResult carrying the location to navigate to.

    Raises:
        SeriesPayloadError: When the series metadata is not a pair of JSON lists.
    """

    pairs = series.dimension_pairs()
    dimension_values, controls = split_query_values(parse_dimension_values(location.query), control_keys)

    for name, value in pairs:
        if value and value != WILDCARD and name not in control_keys:
            dimension_values[name] = str(value)

    new_location = location.with_query(encode_dimension_values({**controls, **dimension_values}))
    logger.info("Drill-down to %s", new_location.href)
    return DrillDownResult(dimension_values=dimension_values, location=new_location)


@dataclass(slots=True)
class ModeToggleControl:
    """Visual state of the mode toggle control."""

    active: bool = False

    @property
    def css_class(self) -> str:
        return ACTIVE_CLASS if self.active else ""


@dataclass(slots=True)
class DimensionTimeSeriesPage:
    """One page lifetime of the dimension time-series grid.

    The registry and base config are built once from the document and location.
    The mode toggle replaces the base config (never mutates it) and
    re-dispatches; a chart click returns a navigation target and retires the
    page.

    Args:
        registry: Complete dimension panels.
        location: Current browser location.
        base_config: Base RenderConfig derived from the location.
        renderer: Charting primitive used for every panel.
        control: Mode toggle control state.
        control_keys: Query keys owned by the side panel rather than by drill-down.
    """

    registry: PanelRegistry
    location: Location
    base_config: RenderConfig
    renderer: Renderer
    control: ModeToggleControl = field(default_factory=ModeToggleControl)
    titles: dict[str, str] = field(default_factory=dict)
    control_keys: tuple[str, ...] = ()
    navigated_to: Location | None = None

    @classmethod
    def load(
        cls,
        *,
        document: str,
        location: Location,
        side_controls: SideControls,
        renderer: Renderer,
        control_keys: tuple[str, ...] = (),
    ) -> "DimensionTimeSeriesPage":
        """Build the registry and base config for a freshly loaded page."""

        registry = build_registry(document)
        base_config = derive_config(location.fragment, location.path, side_controls)
        return cls(
            registry=registry,
            location=location,
            base_config=base_config,
            renderer=renderer,
            control=ModeToggleControl(active=base_config.mode == "own"),
            control_keys=control_keys,
        )

    def render(self) -> list[PanelRender]:
        """Dispatch every panel with the current base config."""

        self._ensure_current()
        return dispatch_all(self.registry, self.base_config, renderer=self.renderer, titles=self.titles)

    def on_mode_toggle(self) -> tuple[ModeToggleResult, list[PanelRender]]:
        """Handle a click on the mode toggle control."""

        self._ensure_current()
        result = toggle_mode(control_active=self.control.active, location=self.location)
        self.control.active = result.active
        self.location = result.location
        self.base_config = self.base_config.with_mode(result.mode)
        return result, self.render()

    def on_chart_click(self, series: Series) -> DrillDownResult:
        """Handle a click on a rendered series."""

        self._ensure_current()
        result = drill_down(series=series, location=self.location, control_keys=self.control_keys)
        self.navigated_to = result.location
        return result

    def _ensure_current(self) -> None:
        if self.navigated_to is not None:
            raise StaleNavigationError(href=self.navigated_to.href)
