import json

import dash
import pandas as pd
import pytest
from dash.exceptions import PreventUpdate

from perfchart_dashboard import config, session
from perfchart_dashboard.acquisition import LiveFeed
from perfchart_dashboard.dashboard.app import (
    GLYPHS,
    _is_autorange,
    _selected_range,
    create_app,
    dispatch,
    live_figure,
    render_selection_panel,
)
from perfchart_dashboard.normalizer import Dataset
from perfchart_dashboard.session import SessionState
from perfchart_dashboard.simulation import VitalSignsSimulator
from perfchart_dashboard.zoom import ZoomWindow

from conftest import upload_contents, xlsx_bytes


def _walk(component):
    yield component
    children = getattr(component, "children", None)
    if children is None or isinstance(children, str):
        return
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        if not isinstance(child, str):
            yield from _walk(child)


def _ids(components):
    return {
        (c.id["section"], c.id["action"]): c
        for root in components
        for c in _walk(root)
        if isinstance(getattr(c, "id", None), dict)
    }


def _glyph(row):
    return row.children[0].children


def test_create_app_without_live_page():
    app = create_app()
    ids = {getattr(c, "id", None) for c in _walk(app.layout)}
    assert {"upload", "session-store", "perf-graph", "zoom-badge", "selection-panel"} <= ids
    assert "live-graphs" not in ids


def test_create_app_with_live_page():
    feed = LiveFeed(source=VitalSignsSimulator(), sample_period_s=1.0, history_points=10)
    app = create_app(feed)
    ids = {getattr(c, "id", None) for c in _walk(app.layout)}
    assert {"live-cards", "live-graphs", "live-window", "live-interval"} <= ids


def test_panel_for_empty_session():
    panel = render_selection_panel(SessionState())
    assert len(panel) == 1
    assert not _ids(panel)


def test_panel_shows_tri_states(file_a, file_b):
    state = session.add_dataset(session.add_dataset(SessionState(), file_a), file_b)
    state = session.toggle_series(state, "A__Indicateur1")

    rows = _ids(render_selection_panel(state))

    assert _glyph(rows[("quick", '["all"]')]) == GLYPHS["indeterminate"]
    assert _glyph(rows[("files", '["file", "A"]')]) == GLYPHS["indeterminate"]
    assert _glyph(rows[("quick", '["main", "A"]')]) == GLYPHS["checked"]
    assert _glyph(rows[("quick", '["main", "B"]')]) == GLYPHS["unchecked"]
    assert _glyph(rows[("files", '["group", "A", 0]')]) == GLYPHS["indeterminate"]
    assert _glyph(rows[("quick", '["one", "A__Indicateur1"]')]) == GLYPHS["checked"]
    assert _glyph(rows[("files", '["one", "A__Indicateur1"]')]) == GLYPHS["checked"]
    assert _glyph(rows[("files", '["group", "B", 0]')]) == GLYPHS["unchecked"]


def test_selected_range_parsing():
    assert _selected_range(None) is None
    assert _selected_range({"points": []}) is None
    assert _selected_range({"range": {"x": [3, 9], "y": [0, 1]}}) == [3, 9]


def test_autorange_detection():
    assert _is_autorange({"xaxis.autorange": True, "yaxis.autorange": True})
    assert not _is_autorange({"xaxis.range[0]": 1})
    assert not _is_autorange(None)


def test_live_figure_uses_fixed_domain():
    chart = config.DEMO_CHARTS[0]
    sim = VitalSignsSimulator()
    history = [sim.sample() for _ in range(3)]
    fig = live_figure(chart, history)

    assert list(fig.layout.yaxis.range) == list(chart["domain"])
    assert list(fig.data[0].x) == ["1s", "2s", "3s"]


def test_run_cli_defaults():
    from perfchart_dashboard.run import parse_args

    args = parse_args([])
    assert (args.host, args.port, args.no_live) == (config.HOST, config.PORT, False)
    assert parse_args(["--port", "9000", "--no-live"]).port == 9000


# ------------------------------------------------------------------
# Event dispatch
# ------------------------------------------------------------------
def _toggle_trigger(section, action):
    return {"type": "sel-toggle", "section": section, "action": json.dumps(action)}


@pytest.fixture
def zoomed(timeline):
    return session.zoom_select(session.add_dataset(SessionState(), timeline), 10, 20)


def test_upload_while_zoomed_keeps_the_window(zoomed):
    df = pd.DataFrame({"Heure programme": [0, 5], "Indicateur1": [1, 2]})
    contents = [upload_contents(xlsx_bytes(df))] * 2

    state, status = dispatch(zoomed, "upload.contents", "upload", contents,
                             contents=contents, filenames=["new.xlsx", "data.csv"])

    assert [ds.name for ds in state.datasets] == ["run.xlsx", "new.xlsx"]
    assert state.zoom.window == ZoomWindow(10.0, 20.0)
    texts = sorted(div.children for div in status)
    assert texts[0].startswith("✓ new.xlsx")
    assert texts[1].startswith("✗ data.csv")


def test_empty_upload_is_ignored(zoomed):
    with pytest.raises(PreventUpdate):
        dispatch(zoomed, "upload.contents", "upload", None, contents=None, filenames=None)


def test_toggle_click_updates_selection(zoomed):
    trigger = _toggle_trigger("files", ["one", "run.xlsx__Pression"])
    state, status = dispatch(zoomed, "x.n_clicks", trigger, 1)

    assert state.selection == {"run.xlsx__Pression": True}
    assert status is dash.no_update


def test_panel_rerender_is_not_a_click(zoomed):
    trigger = _toggle_trigger("quick", ["all"])
    with pytest.raises(PreventUpdate):
        dispatch(zoomed, "x.n_clicks", trigger, 0)


def test_box_selection_commits_a_window(timeline):
    state = session.add_dataset(SessionState(), timeline)
    state, _ = dispatch(state, "perf-graph.selectedData", "perf-graph", {"range": {"x": [25, 5]}})
    assert state.zoom.window == ZoomWindow(5.0, 25.0)


def test_cleared_selection_resets_zoom(zoomed):
    state, _ = dispatch(zoomed, "perf-graph.selectedData", "perf-graph", None)
    assert state.zoom.window is None

    with pytest.raises(PreventUpdate):
        dispatch(state, "perf-graph.selectedData", "perf-graph", None)
    with pytest.raises(PreventUpdate):
        dispatch(zoomed, "perf-graph.selectedData", "perf-graph", {"points": []})


def test_autorange_relayout_resets_zoom(zoomed):
    state, _ = dispatch(zoomed, "perf-graph.relayoutData", "perf-graph", {"xaxis.autorange": True})
    assert state.zoom.window is None

    with pytest.raises(PreventUpdate):
        dispatch(zoomed, "perf-graph.relayoutData", "perf-graph", {"xaxis.range[0]": 3})
    with pytest.raises(PreventUpdate):
        dispatch(state, "perf-graph.relayoutData", "perf-graph", {"xaxis.autorange": True})


def test_badge_click_resets_zoom(zoomed):
    state, _ = dispatch(zoomed, "zoom-badge.n_clicks", "zoom-badge", 1)
    assert state.zoom.window is None

    with pytest.raises(PreventUpdate):
        dispatch(zoomed, "zoom-badge.n_clicks", "zoom-badge", 0)


def test_unknown_trigger_is_ignored(zoomed):
    with pytest.raises(PreventUpdate):
        dispatch(zoomed, "tabs.value", "tabs", "live")


def test_same_label_groups_get_distinct_ids():
    ds = Dataset("f", ("Indicateur1", "indicateur1"), ({"Temps": 0.0, "Indicateur1": 1.0},))
    state = session.add_dataset(SessionState(), ds)

    rows = _ids(render_selection_panel(state))
    assert rows[("files", '["group", "f", 0]')].children[1].children == "INDICATEUR1"
    assert rows[("files", '["group", "f", 1]')].children[1].children == "INDICATEUR1"
