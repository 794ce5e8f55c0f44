"""Unit tests for dispatching renders across dimension panels."""

from __future__ import annotations

import pytest

from analysis.render_config import RenderConfig
from core.dimension_charts.dispatch import dispatch_all
from core.dimension_charts.registry import build_registry

pytestmark = pytest.mark.unit


class RecordingRenderer:
    """Renderer double that records each call."""

    def __init__(self, *, fail_on: str | None = None) -> None:
        self.calls: list[tuple[object, object, RenderConfig]] = []
        self.fail_on = fail_on

    def __call__(self, plot, tooltip, config):
        if config.dimension == self.fail_on:
            raise RuntimeError(f"cannot draw {config.dimension}")
        self.calls.append((plot, tooltip, config))
        return config.dimension


def test_dispatch_renders_every_panel_once(make_grid) -> None:
    """Each registered dimension is rendered exactly once with its own regions."""

    registry = build_registry(make_grid(["country", "device"]))
    renderer = RecordingRenderer()
    titles: dict[str, str] = {}

    renders = dispatch_all(registry, RenderConfig(mode="own"), renderer=renderer, titles=titles)

    assert [call[2].dimension for call in renderer.calls] == ["country", "device"]
    assert titles == {"country": "country", "device": "device"}
    for plot, tooltip, config in renderer.calls:
        panel = registry[config.dimension]
        assert plot is panel.plot
        assert tooltip is panel.tooltip
        assert config.legend_container is panel.legend
        assert config.mode == "own"
    assert [render.result for render in renders] == ["country", "device"]


def test_dispatch_clones_base_config_per_panel(make_grid) -> None:
    """Per-panel configs are distinct from each other and from the base."""

    registry = build_registry(make_grid(["country", "device", "browser"]))
    base = RenderConfig()
    renderer = RecordingRenderer()

    dispatch_all(registry, base, renderer=renderer)

    configs = [call[2] for call in renderer.calls]
    assert len({id(config) for config in configs}) == 3
    assert all(config is not base for config in configs)
    assert base.dimension is None
    assert base.legend_container is None


def test_dispatch_propagates_renderer_failures(make_grid) -> None:
    """A renderer error aborts the remaining panels."""

    registry = build_registry(make_grid(["country", "device", "browser"]))
    renderer = RecordingRenderer(fail_on="device")

    with pytest.raises(RuntimeError, match="cannot draw device"):
        dispatch_all(registry, RenderConfig(), renderer=renderer)

    assert [call[2].dimension for call in renderer.calls] == ["country"]
