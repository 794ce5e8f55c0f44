"""Unit tests for the mode toggle and chart click drill-down."""

from __future__ import annotations

import pytest

from analysis.render_config import SideControls
from analysis.series_filter import Series, SeriesPayloadError
from analysis.url_state import Location, parse_dimension_values, parse_hash_parameters
from core.dimension_charts.interactions import (
    ACTIVE_CLASS,
    DimensionTimeSeriesPage,
    ModeToggleControl,
    NavigationEffect,
    StaleNavigationError,
    drill_down,
    toggle_mode,
)

pytestmark = pytest.mark.unit

PAGE_HREF = "http://testserver/dashboard/ads/AGGREGATE_1_HOURS/TIME_SERIES_FULL/MULTI_TIME_SERIES/1/2/"


class RecordingRenderer:
    """Renderer double that records each call's config."""

    def __init__(self) -> None:
        self.configs = []

    def __call__(self, plot, tooltip, config):
        self.configs.append(config)
        return None


def _page(make_grid, href: str = PAGE_HREF) -> tuple[DimensionTimeSeriesPage, RecordingRenderer]:
    renderer = RecordingRenderer()
    page = DimensionTimeSeriesPage.load(
        document=make_grid(["country", "device"]),
        location=Location.from_href(href),
        side_controls=SideControls(amount=1, unit="HOURS"),
        renderer=renderer,
    )
    return page, renderer


def test_toggle_mode_from_inactive_switches_to_own() -> None:
    """An inactive control switches to `own`, sets active, and writes the hash."""

    location = Location.from_href("/dashboard/ads/?country=US#other=1")
    result = toggle_mode(control_active=False, location=location)

    assert result.mode == "own"
    assert result.active is True
    assert result.effect is NavigationEffect.SOFT
    assert parse_hash_parameters(result.location.fragment) == {"other": "1", "dimensionTimeSeriesMode": "own"}
    assert result.location.query == "country=US"


def test_toggle_mode_from_active_switches_to_same() -> None:
    """An active control switches back to `same` and clears the class."""

    location = Location.from_href("/d#dimensionTimeSeriesMode=own")
    result = toggle_mode(control_active=True, location=location)

    assert result.mode == "same"
    assert result.active is False
    assert result.location.hash == "#dimensionTimeSeriesMode=same"
    assert ModeToggleControl(active=result.active).css_class == ""
    assert ModeToggleControl(active=True).css_class == ACTIVE_CLASS


def test_drill_down_keeps_existing_selection_for_wildcards(make_series) -> None:
    """Wildcard positions leave existing query selections untouched."""

    series = make_series((0, 1), dimensions=["US", "*"], names=["country", "device"])
    location = Location.from_href("/dashboard/ads/?device=mobile")

    result = drill_down(series=series, location=location)

    assert result.dimension_values == {"device": "mobile", "country": "US"}
    assert parse_dimension_values(result.location.query) == {"country": "US", "device": "mobile"}
    assert result.effect is NavigationEffect.NAVIGATE


def test_drill_down_overwrites_and_skips_empty_values(make_series) -> None:
    """Concrete values overwrite; empty or missing values are ignored."""

    series = make_series(dimensions=["CA", "", "chrome"], names=["country", "device", "browser", "os"])
    location = Location.from_href("/d?country=US&device=mobile")

    result = drill_down(series=series, location=location)

    assert result.dimension_values == {"country": "CA", "device": "mobile", "browser": "chrome"}


def test_drill_down_rejects_malformed_metadata() -> None:
    """Malformed JSON aborts the click without a partial drill-down."""

    series = Series(dimensions="[not json", dimension_names='["country"]')
    with pytest.raises(SeriesPayloadError):
        drill_down(series=series, location=Location.from_href("/d?device=mobile"))


def test_drill_down_rejects_non_list_metadata() -> None:
    """Metadata that decodes to an object is rejected, not indexed."""

    series = Series(dimensions='{"0": "US"}', dimension_names='["country"]')
    with pytest.raises(SeriesPayloadError):
        drill_down(series=series, location=Location.from_href("/d"))


def test_drill_down_carries_control_keys_without_selecting_them(make_series) -> None:
    """Side-panel keys stay in the query string but are not dimension selections."""

    series = make_series(dimensions=["US", "7"], names=["country", "aggregate_size"])
    location = Location.from_href("/d?aggregate_size=5&aggregate_unit=MINUTES&device=mobile")

    result = drill_down(
        series=series,
        location=location,
        control_keys=("aggregate_size", "aggregate_unit"),
    )

    assert result.dimension_values == {"device": "mobile", "country": "US"}
    assert parse_dimension_values(result.location.query) == {
        "aggregate_size": "5",
        "aggregate_unit": "MINUTES",
        "device": "mobile",
        "country": "US",
    }


def test_page_render_dispatches_all_panels(make_grid) -> None:
    """Initial render dispatches each panel with the derived base config."""

    page, renderer = _page(make_grid)
    renders = page.render()

    assert [render.panel.dimension for render in renders] == ["country", "device"]
    assert [config.mode for config in renderer.configs] == ["same", "same"]
    assert page.titles == {"country": "country", "device": "device"}
    assert page.control.active is False


def test_page_mode_toggle_redispatches_once_with_new_mode(make_grid) -> None:
    """One toggle click writes `own` to the hash and re-renders every panel once."""

    page, renderer = _page(make_grid)
    base_before = page.base_config

    result, renders = page.on_mode_toggle()

    assert result.mode == "own"
    assert page.control.active is True
    assert parse_hash_parameters(page.location.fragment)["dimensionTimeSeriesMode"] == "own"
    assert len(renders) == 2
    assert [config.mode for config in renderer.configs] == ["own", "own"]
    assert base_before.mode == "same"
    assert page.base_config.mode == "own"

    page.on_mode_toggle()
    assert [config.mode for config in renderer.configs[2:]] == ["same", "same"]
    assert page.control.active is False


def test_page_control_starts_active_when_hash_selects_own(make_grid) -> None:
    """The control's active state matches the mode loaded from the hash."""

    page, _ = _page(make_grid, PAGE_HREF + "#dimensionTimeSeriesMode=own")
    assert page.base_config.mode == "own"
    assert page.control.active is True


def test_page_chart_click_retires_page(make_grid, make_series) -> None:
    """After a drill-down navigation the page refuses further events."""

    page, _ = _page(make_grid, PAGE_HREF + "?device=mobile")
    series = make_series((0, 1), dimensions=["US", "*"], names=["country", "device"])

    result = page.on_chart_click(series)

    assert result.location.href.startswith(PAGE_HREF)
    assert parse_dimension_values(result.location.query) == {"device": "mobile", "country": "US"}
    with pytest.raises(StaleNavigationError):
        page.on_mode_toggle()
    with pytest.raises(StaleNavigationError):
        page.render()
