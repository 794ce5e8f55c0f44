"""Dimension time-series comparison grid.

A grid of per-dimension comparison charts whose configuration is kept in sync
with the browser location. This package contains the panel registry, the render
dispatcher, the chart payload renderer and the interaction handlers used by the
dimension time-series views.
"""
