"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path(
        "dashboard/<str:collection>/<str:metric_function>/<str:metric_view_type>/"
        "<str:dimension_view_type>/<int:baseline_millis>/<int:current_millis>/",
        views.dimension_time_series,
        name="dimension_time_series",
    ),
    path("dimensions/drill-down/", views.dimension_drill_down, name="dimension_drill_down"),
    path("api/dimension-time-series/render/", views.dimension_render_api, name="dimension_render_api"),
    path(
        "api/dimension-time-series/toggle-mode/",
        views.dimension_toggle_mode_api,
        name="dimension_toggle_mode_api",
    ),
    path(
        "api/dimension-time-series/drill-down/",
        views.dimension_drill_down_api,
        name="dimension_drill_down_api",
    ),
]
