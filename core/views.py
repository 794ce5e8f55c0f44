"""Views for the dimension time-series comparison grid.

The page view renders one panel per configured dimension. The JSON API lets
the dashboard script hand over the full browser location (including the hash
fragment, which browsers never send to the server) and receive per-panel chart
payloads or navigation targets back.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.template.loader import render_to_string
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from analysis.render_config import SideControls, derive_config, side_controls_from_metric_function
from analysis.series_filter import Series, SeriesPayloadError
from analysis.url_state import Location, parse_dimension_values, parse_path, split_query_values
from core.dimension_charts.dispatch import PanelRender
from core.dimension_charts.interactions import DimensionTimeSeriesPage, drill_down
from core.dimension_charts.renderer import ChartPayloadRenderer
from core.forms import CONTROL_FIELD_NAMES, DimensionControlsForm, DrillDownForm
from core.redirects import is_safe_target, safe_redirect

logger = logging.getLogger(__name__)


class _BadRequest(ValueError):
    """Raised for malformed API input; rendered as HTTP 400."""


def configured_dimensions() -> list[str]:
    """Return the dimension names that get a panel, in display order."""

    config = getattr(settings, "DIMENSION_TIME_SERIES", {}) or {}
    return [str(name) for name in config.get("DIMENSIONS", ())]


def _grid_markup(dimensions: list[str]) -> str:
    """Render the panel grid markup the registry is built from."""

    return render_to_string("core/dimension_grid.html", {"dimensions": dimensions})


@require_GET
def dimension_time_series(
    request: HttpRequest,
    *,
    collection: str,
    metric_function: str,
    metric_view_type: str,
    dimension_view_type: str,
    baseline_millis: int,
    current_millis: int,
) -> HttpResponse:
    """Render the dimension time-series page for a metric view."""

    defaults = side_controls_from_metric_function(metric_function)
    submitted = any(name in request.GET for name in CONTROL_FIELD_NAMES)
    controls_form = DimensionControlsForm(
        request.GET if submitted else None,
        initial={"aggregate_size": defaults.amount, "aggregate_unit": defaults.unit},
    )
    controls_form.is_valid()
    # The hash fragment is client-only; the server renders the default mode.
    base_config = derive_config("", request.path, controls_form.side_controls(defaults))
    dimension_values, _ = split_query_values(request.GET.dict(), CONTROL_FIELD_NAMES)
    dimensions = configured_dimensions()
    return render(
        request,
        "core/dimension_time_series.html",
        {
            "metric_path": parse_path(request.path),
            "grid_markup": _grid_markup(dimensions),
            "controls_form": controls_form,
            "dimension_values": dimension_values,
            "base_config": base_config.to_payload(),
            "api_urls": {
                "render": reverse("core:dimension_render_api"),
                "toggleMode": reverse("core:dimension_toggle_mode_api"),
                "drillDown": reverse("core:dimension_drill_down_api"),
            },
        },
    )


@require_GET
def dimension_drill_down(request: HttpRequest) -> HttpResponse:
    """Navigate to the drill-down location for a clicked series (no-script fallback)."""

    form = DrillDownForm(request.GET)
    if not form.is_valid():
        return JsonResponse({"error": "Invalid drill-down request.", "fields": form.errors.get_json_data()}, status=400)
    location = Location.from_href(form.cleaned_data["href"])
    series = Series(
        dimensions=form.cleaned_data["dimensions"],
        dimension_names=form.cleaned_data["dimension_names"],
    )
    try:
        result = drill_down(series=series, location=location, control_keys=CONTROL_FIELD_NAMES)
    except SeriesPayloadError as exc:
        return _bad_request(exc)
    return safe_redirect(request, candidates=[result.location.href], fallback=location.path)


@require_POST
def dimension_render_api(request: HttpRequest) -> JsonResponse:
    """Render every panel for the posted browser location."""

    try:
        body = _json_body(request)
        page = _load_page(body)
    except _BadRequest as exc:
        return _bad_request(exc)

    renders = page.render()
    return JsonResponse(
        {
            "href": page.location.href,
            "mode": page.base_config.mode,
            "active": page.control.active,
            "panels": [_panel_payload(render_, page.titles) for render_ in renders],
            "skipped": sorted(page.registry.incomplete),
        }
    )


@require_POST
def dimension_toggle_mode_api(request: HttpRequest) -> JsonResponse:
    """Toggle the comparison mode and re-render every panel in place."""

    try:
        body = _json_body(request)
        page = _load_page(body)
    except _BadRequest as exc:
        return _bad_request(exc)

    if "active" in body:
        page.control.active = bool(body["active"])
    result, renders = page.on_mode_toggle()
    return JsonResponse(
        {
            "effect": result.effect.value,
            "href": result.location.href,
            "hash": result.location.hash,
            "mode": result.mode,
            "active": result.active,
            "panels": [_panel_payload(render_, page.titles) for render_ in renders],
        }
    )


@require_POST
def dimension_drill_down_api(request: HttpRequest) -> JsonResponse:
    """Return the navigation target for a click on a rendered series."""

    try:
        body = _json_body(request)
        location = _location(body)
        series = Series.from_payload(_mapping(body.get("series"), name="series"))
        result = drill_down(series=series, location=location, control_keys=CONTROL_FIELD_NAMES)
    except (_BadRequest, SeriesPayloadError) as exc:
        return _bad_request(exc)

    if not is_safe_target(request, result.location.href):
        return JsonResponse({"error": "Navigation target is not allowed."}, status=400)
    return JsonResponse(
        {
            "effect": result.effect.value,
            "href": result.location.href,
            "search": result.location.search,
            "dimensionValues": result.dimension_values,
        }
    )


def _bad_request(exc: Exception) -> JsonResponse:
    logger.warning("Rejected dimension time-series request: %s", exc)
    return JsonResponse({"error": str(exc)}, status=400)


def _json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body."""

    try:
        body = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise _BadRequest("Request body must be JSON.") from exc
    if not isinstance(body, dict):
        raise _BadRequest("Request body must be a JSON object.")
    return body


def _mapping(value: object, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _BadRequest(f"`{name}` must be a JSON object.")
    return value


def _location(body: dict[str, Any]) -> Location:
    href = body.get("href")
    if not isinstance(href, str) or not href.strip():
        raise _BadRequest("`href` is required.")
    return Location.from_href(href.strip())


def _side_controls(body: dict[str, Any], location: Location) -> SideControls:
    """Validate side-panel controls.

    Posted `controls` win over control keys in the location's query string,
    which win over the defaults encoded in the metric path.
    """

    defaults = side_controls_from_metric_function(parse_path(location.path).metric_function)
    _, query_controls = split_query_values(parse_dimension_values(location.query), CONTROL_FIELD_NAMES)
    raw = {**query_controls, **_mapping(body.get("controls"), name="controls")}
    form = DimensionControlsForm(
        {
            "aggregate_size": raw.get("aggregate_size", defaults.amount),
            "aggregate_unit": raw.get("aggregate_unit", defaults.unit),
        }
    )
    if not form.is_valid():
        raise _BadRequest(f"Invalid controls: {form.errors.as_json()}")
    return form.side_controls()


def _series_by_dimension(body: dict[str, Any]) -> dict[str, list[Series]]:
    raw = _mapping(body.get("series"), name="series")
    series_by_dimension: dict[str, list[Series]] = {}
    for dimension, payloads in raw.items():
        if not isinstance(payloads, list):
            raise _BadRequest(f"`series[{dimension!r}]` must be a list.")
        try:
            series_by_dimension[str(dimension)] = [Series.from_payload(_mapping(p, name="series")) for p in payloads]
        except SeriesPayloadError as exc:
            raise _BadRequest(f"`series[{dimension!r}]`: {exc}") from exc
    return series_by_dimension


def _load_page(body: dict[str, Any]) -> DimensionTimeSeriesPage:
    location = _location(body)
    document = body.get("document")
    if document is None:
        document = _grid_markup(configured_dimensions())
    elif not isinstance(document, str):
        raise _BadRequest("`document` must be a string of HTML.")
    return DimensionTimeSeriesPage.load(
        document=document,
        location=location,
        side_controls=_side_controls(body, location),
        renderer=ChartPayloadRenderer(_series_by_dimension(body)),
        control_keys=CONTROL_FIELD_NAMES,
    )


def _panel_payload(render_: PanelRender, titles: dict[str, str]) -> dict[str, Any]:
    dimension = render_.panel.dimension
    return {
        "dimension": dimension,
        "title": titles.get(dimension, dimension),
        "config": render_.config.to_payload(),
        "chart": render_.result,
    }
