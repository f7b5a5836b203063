"""Radar Graphs -- Python tooling for plotting radar telemetry logs.

This package provides tools for:
- Reading delimited telemetry exports (tab, semicolon or comma separated)
- Detecting the time column and the radar voltage/ADC columns from the header
- Falling back to positional columns when the header is absent or unusable
- Fitting bounds and computing readable axis ticks
- Interpolating every series at a cursor position, with snap-to-peak
- Summarising series by their absolute trapezoidal area

Key principles:
- Only finite samples are ever stored
- A file that yields nothing is reported, never half-loaded
- All load decisions are reported as diagnostics

Main subpackages:
- models: Series, Bounds, SchemaMap
- ingest: CSV rows, value parsing, schema detection, series building
- analysis: coordinates and ticks, interpolation and peaks, area aggregation
- chart: ChartSession state and screen-space scene composition
- gui: Interactive ipywidgets viewer with a Matplotlib renderer
"""

__all__ = []
