"""GUI package - interactive ipywidgets viewer.

Entry point:
    from radar_graphs.gui.app import build_gui
    gui = build_gui()

Layout:
- Files box (one CSV path per line) with Load / Clear
- Fit to data, Pie (area per series), Export (PNG transparent, JPEG on white)
- Plot area with hover readout (needs an interactive Matplotlib backend)
- Log: load diagnostics (CHECK:) and failures (ERROR:)
"""
