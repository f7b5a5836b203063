from __future__ import annotations

import locale
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import ipywidgets as w
from IPython.display import display

from radar_graphs.chart.scene import build_hover_overlay, build_plot_scene
from radar_graphs.chart.session import BatchLoadResult, ChartSession
from radar_graphs.gui.log_view import HtmlLog
from radar_graphs.gui.render_mpl import draw_primitives, export_figure, render_pie, render_scene


# Keep a single active GUI instance per kernel to avoid duplicated callbacks / stacked widgets.
_ACTIVE_GUI: Optional[w.Widget] = None

# Repeated clicks on the same button inside this window are ignored.
_DEBOUNCE_S = 0.4


@dataclass
class ViewerState:
    """Mutable state shared by the viewer callbacks."""
    busy: bool = False
    last_action_key: Optional[str] = None
    last_action_t: float = 0.0
    view: str = "plot"
    fig: object | None = None
    overlay: List[object] = field(default_factory=list)
    interactive: Optional[bool] = None


def _get_pyplot():
    """Import pyplot lazily (backend must already be configured)."""
    import matplotlib.pyplot as plt  # late import by design
    return plt


def _try_enable_interactive_backend() -> Tuple[bool, str]:
    """
    Try to enable an interactive Matplotlib backend so hover events reach the chart.

    Returns:
        (ok, message)
    """
    import matplotlib as mpl

    try:
        import ipympl  # noqa: F401
        mpl.use("module://ipympl.backend_nbagg", force=True)
        return True, "Interactive backend: ipympl widget (hover enabled)."
    except Exception:
        pass

    try:
        mpl.use("nbagg", force=True)
        return True, "Interactive backend: Matplotlib nbagg (hover enabled)."
    except Exception as exc:
        return False, f"Interactive backend unavailable, hover disabled (static plots): {exc}"


def parse_paths(text: str) -> List[str]:
    """One path per line; blank lines skipped, surrounding quotes removed."""
    out: List[str] = []
    for line in (text or "").splitlines():
        s = line.strip().strip('"').strip("'").strip()
        if s:
            out.append(s)
    return out


def report_batch(result: BatchLoadResult) -> None:
    """Print a load summary; diagnostics as CHECK: lines, failed files as ERROR: lines."""
    for r in result.loaded:
        mode = "header-driven" if r.header_driven else "positional"
        print(f"Loaded {r.source_path.name}: {r.series_added} series ({mode})")
        for msg in r.warnings:
            print("CHECK:", msg)
    for e in result.errors:
        print("ERROR:", e)
    print(f"Total series: {result.total_series}")


def build_viewer_panel(
    session: Optional[ChartSession] = None,
    *,
    width: int = 960,
    height: int = 540,
) -> w.Widget:
    """
    Radar graph viewer panel.

    Paste one CSV path per line and press Load; files are appended to the
    current chart. Hovering the plot (interactive backend only) shows the value
    of every series at the pointer, snapping to a nearby peak.
    """
    session = session if session is not None else ChartSession()
    state = ViewerState()
    log = HtmlLog(title="Log", height_px=180)

    ta_paths = w.Textarea(
        description="Files",
        placeholder="One CSV path per line",
        layout=w.Layout(width="80%", height="90px"),
    )
    btn_load = w.Button(description="Load", button_style="primary", layout=w.Layout(width="110px"))
    btn_clear = w.Button(description="Clear", layout=w.Layout(width="110px"))
    btn_fit = w.Button(description="Fit to data", layout=w.Layout(width="110px"))
    btn_pie = w.Button(description="Pie", layout=w.Layout(width="110px"))
    txt_export = w.Text(description="Export to", placeholder="chart.png or chart.jpg", layout=w.Layout(width="420px"))
    btn_export = w.Button(description="Export", button_style="info", layout=w.Layout(width="110px"))

    status = w.HTML("<b>Status:</b> no data")
    readout = w.HTML("")
    out_plot = w.Output(layout=w.Layout(border="1px solid #ddd", padding="4px"))

    def _set_status(s: str) -> None:
        status.value = f"<b>Status:</b> {s}"

    def _refresh_status() -> None:
        n = len(session.series)
        if n == 0:
            _set_status("no data")
        else:
            _set_status(f"{n} series | X: {session.x_title} | Y: {session.y_title}")

    def _begin(key: str) -> bool:
        now = time.monotonic()
        if state.busy:
            return False
        if state.last_action_key == key and (now - state.last_action_t) < _DEBOUNCE_S:
            return False
        state.busy = True
        state.last_action_key = key
        state.last_action_t = now
        return True

    def _end() -> None:
        state.busy = False

    def _close_fig() -> None:
        if state.fig is not None:
            try:
                _get_pyplot().close(state.fig)
            except Exception:
                pass
        state.fig = None
        state.overlay = []

    def _clear_overlay() -> None:
        for a in state.overlay:
            a.remove()
        state.overlay = []

    def _on_motion(event) -> None:
        if state.view != "plot" or state.fig is None:
            return
        _clear_overlay()
        hover = None
        if event.xdata is not None and event.ydata is not None:
            rect = session.layout.plot_rect(width, height)
            hover = session.hover(event.xdata, event.ydata, rect)
            if hover is not None:
                ax = state.fig.axes[0]
                state.overlay = draw_primitives(ax, build_hover_overlay(session, hover, rect))
        readout.value = "" if hover is None else "<br>".join(hover.text_lines(session.x_title))
        state.fig.canvas.draw_idle()

    def _redraw() -> None:
        state.view = "plot"
        readout.value = ""
        _close_fig()
        out_plot.clear_output(wait=True)
        if not session.has_data:
            return
        if state.interactive is None:
            state.interactive, msg = _try_enable_interactive_backend()
            log.write(msg)
        plt = _get_pyplot()
        fig = plt.figure(figsize=(width / 100, height / 100), dpi=100)
        render_scene(build_plot_scene(session, width, height), width, height, fig=fig)
        fig.canvas.mpl_connect("motion_notify_event", _on_motion)
        state.fig = fig
        with out_plot:
            plt.show()

    def _on_load(_btn) -> None:
        if not _begin("load"):
            return
        try:
            paths = parse_paths(ta_paths.value)
            if not paths:
                log.write("WARNING: no file paths given.")
                return
            _set_status(f"loading {len(paths)} file(s)...")
            with log.capture():
                result = session.load_files(paths)
                report_batch(result)
            _refresh_status()
            _redraw()
        except Exception as exc:
            log.write(f"ERROR: {exc!r}")
            _refresh_status()
        finally:
            _end()

    def _on_clear(_btn) -> None:
        if not _begin("clear"):
            return
        try:
            session.clear()
            _close_fig()
            out_plot.clear_output()
            readout.value = ""
            log.write("Chart cleared.")
            _refresh_status()
        finally:
            _end()

    def _on_fit(_btn) -> None:
        if not _begin("fit"):
            return
        try:
            b = session.fit_to_data()
            log.write(f"Bounds: x [{b.min_x:.6g}, {b.max_x:.6g}]  y [{b.min_y:.6g}, {b.max_y:.6g}]")
            _redraw()
        finally:
            _end()

    def _on_pie(_btn) -> None:
        if not _begin("pie"):
            return
        try:
            items = session.pie_items()
            if not items:
                log.write("WARNING: no series with a positive area; nothing to show.")
                return
            _close_fig()
            out_plot.clear_output(wait=True)
            plt = _get_pyplot()
            fig = plt.figure(figsize=(7.2, 4.2), dpi=100)
            render_pie(items, fig=fig)
            state.fig = fig
            state.view = "pie"
            with out_plot:
                plt.show()
                display(session.area_summary())
        finally:
            _end()

    def _on_export(_btn) -> None:
        if not _begin("export"):
            return
        try:
            target = txt_export.value.strip()
            if not target:
                log.write("WARNING: enter an export path (.png, .jpg or .jpeg).")
                return
            if state.view == "pie":
                fig = render_pie(session.pie_items())
            else:
                fig = render_scene(build_plot_scene(session, width, height), width, height)
            path = export_figure(fig, Path(target).expanduser())
            log.write(f"Saved: {path}")
        except (OSError, ValueError) as exc:
            log.write(f"ERROR saving figure: {exc}")
        finally:
            _end()

    btn_load.on_click(_on_load)
    btn_clear.on_click(_on_clear)
    btn_fit.on_click(_on_fit)
    btn_pie.on_click(_on_pie)
    btn_export.on_click(_on_export)

    _refresh_status()
    if session.has_data:
        _redraw()

    top = w.HBox([ta_paths, w.VBox([btn_load, btn_clear])])
    mid = w.HBox([btn_fit, btn_pie, txt_export, btn_export])
    return w.VBox([top, mid, status, out_plot, readout, log.panel])


def _use_user_locale() -> bool:
    """Adopt the user's numeric and date locale so cell parsing sees its separators and day order."""
    try:
        locale.setlocale(locale.LC_NUMERIC, "")
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        print(f"WARNING: user locale unavailable, using C locale ({e})")
        return False
    return True


def build_gui(session: Optional[ChartSession] = None) -> w.Widget:
    """
    Radar graph viewer (Jupyter / VSCode notebooks).

    Closes the previous viewer created from this module before building a new one.
    Switches the process to the user's numeric and date locale first.
    """
    global _ACTIVE_GUI

    if _ACTIVE_GUI is not None:
        try:
            _ACTIVE_GUI.close()
        except Exception:
            pass
        _ACTIVE_GUI = None

    _use_user_locale()
    gui = build_viewer_panel(session)
    _ACTIVE_GUI = gui
    return gui
