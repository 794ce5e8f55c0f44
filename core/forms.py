"""Forms for the dimension time-series dashboard.

The side panel posts an aggregation size and unit; the JSON API posts the
browser location and clicked-series metadata. Both are validated here before
they reach the pure `analysis` layer.
"""

from __future__ import annotations

from django import forms

from analysis.render_config import SideControls
from analysis.time_units import TimeUnit

DEFAULT_AGGREGATE_SIZE = 1
DEFAULT_AGGREGATE_UNIT = TimeUnit.HOURS.value

# Query keys written by the side-panel form; never dimension selections.
CONTROL_FIELD_NAMES = ("aggregate_size", "aggregate_unit")


class DimensionControlsForm(forms.Form):
    """Validate the aggregation controls shown in the dashboard side panel."""

    aggregate_size = forms.IntegerField(
        required=False,
        min_value=1,
        label="Aggregate size",
        help_text="Number of units per aggregation bucket.",
        widget=forms.NumberInput(attrs={"id": "sidenav-aggregate-size"}),
    )
    aggregate_unit = forms.ChoiceField(
        required=False,
        choices=tuple((unit.value, unit.value.title()) for unit in TimeUnit),
        label="Aggregate unit",
        widget=forms.Select(attrs={"id": "sidenav-aggregate-unit"}),
    )

    def side_controls(self, defaults: SideControls | None = None) -> SideControls:
        """Return SideControls from cleaned data, falling back to defaults.

        Call after `is_valid()`. Missing or invalid fields fall back to
        `defaults` (one hour when not given) so the dashboard always renders.
        """

        fallback = defaults or SideControls(amount=DEFAULT_AGGREGATE_SIZE, unit=DEFAULT_AGGREGATE_UNIT)
        cleaned = getattr(self, "cleaned_data", {}) or {}
        size = cleaned.get("aggregate_size") or fallback.amount
        unit = cleaned.get("aggregate_unit") or fallback.unit
        return SideControls(amount=size, unit=unit)


class LocationForm(forms.Form):
    """Validate the browser location posted by the dashboard script."""

    href = forms.CharField(max_length=4096)


class DrillDownForm(LocationForm):
    """Validate a chart click carrying the clicked series identity."""

    dimensions = forms.CharField(max_length=4096)
    dimension_names = forms.CharField(max_length=4096)
