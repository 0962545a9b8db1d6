import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import dash
from dash import ALL, Dash, Input, Output, State, dcc, html
from dash.exceptions import PreventUpdate
import plotly.graph_objs as go

from .. import config
from .. import session
from .. import selection as sel
from ..acquisition import LiveFeed
from ..grouping import group_columns, main_indicators
from ..merger import series_key
from ..projection import build_figure, project, summary_text, window_label
from ..uploads import decode_uploads

GLYPHS = {
    sel.CHECKED: "☑",
    sel.INDETERMINATE: "▣",
    sel.UNCHECKED: "☐",
}

ROW_STYLE = {"cursor": "pointer", "padding": "2px 6px", "fontSize": "0.85rem", "userSelect": "none"}
HEADER_STYLE = {**ROW_STYLE, "fontWeight": "bold", "color": "#3b82f6", "textTransform": "uppercase"}
SECTION_STYLE = {"border": "1px solid #ccc", "borderRadius": "8px", "padding": "0.75rem", "marginBottom": "0.75rem"}

ZOOM_HINT_IDLE = "Cliquer-glisser pour zoomer · Double-clic pour réinitialiser"
ZOOM_HINT_ACTIVE = "Double-clic sur le graphique pour réinitialiser"


# ------------------------------------------------------------------
# Selection panel
# ------------------------------------------------------------------
def _toggle_row(section: str, action: List[Any], label: str, state: str,
                style: Optional[Dict[str, Any]] = None) -> html.Div:
    return html.Div(
        [html.Span(GLYPHS[state], style={"marginRight": "0.4rem"}), html.Span(label)],
        id={"type": "sel-toggle", "section": section, "action": json.dumps(action)},
        n_clicks=0,
        style=style or ROW_STYLE,
    )


def _quick_section(state: session.SessionState) -> html.Div:
    selection = state.selection
    children = [
        html.Div("Sélection rapide", style={"fontSize": "0.75rem", "color": "#777", "marginBottom": "0.25rem"}),
        _toggle_row("quick", ["all"], "Tout sélectionner", sel.tri_state(selection, session.all_keys(state)),
                    style={**ROW_STYLE, "fontWeight": "bold"}),
    ]

    for ds in state.datasets:
        main_keys = session.main_indicator_keys(ds)
        children.append(html.Div(f"📄 {ds.name}", style={"marginTop": "0.5rem", "color": "#06a77d"}))
        children.append(_toggle_row("quick", ["main", ds.name], "Indicateurs principaux",
                                    sel.tri_state(selection, main_keys), style={**ROW_STYLE, "fontWeight": "bold"}))
        children.append(
            html.Div(
                [
                    _toggle_row("quick", ["one", series_key(ds.name, col)], col,
                                sel.tri_state(selection, [series_key(ds.name, col)]))
                    for col in main_indicators(ds.columns)
                ],
                style={"paddingLeft": "1.2rem"},
            )
        )

    return html.Div(children, style={**SECTION_STYLE, "borderColor": "#06d6a0"})


def _file_section(state: session.SessionState, ds) -> html.Div:
    selection = state.selection
    children = [
        _toggle_row("files", ["file", ds.name], f"📄 {ds.name}", sel.tri_state(selection, session.file_keys(ds)),
                    style={**ROW_STYLE, "color": "#06a77d"}),
    ]
    if ds.dropped_rows:
        children.append(html.Div(f"{ds.dropped_rows} ligne(s) ignorée(s)", style={"fontSize": "0.75rem", "color": "#b45309"}))

    for index, group in enumerate(group_columns(ds.columns)):
        keys = [series_key(ds.name, c) for c in group.columns]
        children.append(_toggle_row("files", ["group", ds.name, index], group.label,
                                    sel.tri_state(selection, keys), style=HEADER_STYLE))
        children.append(
            html.Div(
                [_toggle_row("files", ["one", k], col, sel.tri_state(selection, [k])) for k, col in zip(keys, group.columns)],
                style={"paddingLeft": "1.2rem"},
            )
        )

    return html.Div(children, style=SECTION_STYLE)


def render_selection_panel(state: session.SessionState) -> List[Any]:
    if not state.datasets:
        return [html.Div("Aucun fichier chargé. Cliquez sur le bouton ci-dessus.",
                         style={"textAlign": "center", "color": "#777", "marginTop": "2rem"})]
    return [_quick_section(state)] + [_file_section(state, ds) for ds in state.datasets]


# ------------------------------------------------------------------
# Live demo page
# ------------------------------------------------------------------
def _stat_card(chart: Dict[str, Any], value: Any) -> html.Div:
    text_value = "—"
    if value is not None:
        try:
            text_value = f"{float(value):g} {chart['unit']}"
        except (TypeError, ValueError):
            text_value = f"{value}"

    return html.Div(
        [
            html.Div(chart["label"], style={"fontSize": "0.9rem", "color": "#555"}),
            html.Div(text_value, style={"fontSize": "1.4rem", "fontWeight": "bold", "color": chart["color"]}),
        ],
        style={
            "border": "1px solid #ddd",
            "borderRadius": "8px",
            "padding": "0.75rem",
            "boxShadow": "0 1px 3px rgba(0,0,0,0.05)",
        },
    )


def live_figure(chart: Dict[str, Any], history: List[Dict[str, Any]]) -> go.Figure:
    low, high = chart["domain"]
    return go.Figure(
        data=[
            go.Scatter(
                x=[row["t"] for row in history],
                y=[row.get(chart["key"]) for row in history],
                mode="lines",
                name=chart["label"],
                line={"color": chart["color"], "width": 2},
                fill="tozeroy",
            )
        ],
        layout=go.Layout(
            title=f"{chart['label']} ({chart['unit']})",
            yaxis={"range": [low, high], "title": chart["unit"]},
            margin={"l": 40, "r": 20, "t": 40, "b": 40},
            height=260,
        ),
    )


def _live_tab() -> dcc.Tab:
    return dcc.Tab(
        label="Moniteur live",
        value="live",
        children=[
            html.Div(
                [
                    html.Div(id="live-clock", style={"fontFamily": "monospace", "color": "#555"}),
                    dcc.RadioItems(
                        id="live-window",
                        options=config.WINDOW_OPTIONS,
                        value=config.DEFAULT_WINDOW_S,
                        inline=True,
                        inputStyle={"marginLeft": "0.75rem", "marginRight": "0.25rem"},
                    ),
                ],
                style={"display": "flex", "justifyContent": "space-between", "margin": "1rem 0"},
            ),
            html.Div(id="live-cards", style={
                "display": "grid",
                "gridTemplateColumns": "repeat(auto-fit, minmax(180px, 1fr))",
                "gap": "0.75rem",
                "marginBottom": "1rem",
            }),
            html.Div(id="live-graphs", style={
                "display": "grid",
                "gridTemplateColumns": "repeat(auto-fit, minmax(420px, 1fr))",
                "gap": "0.75rem",
            }),
            dcc.Interval(id="live-interval", interval=int(config.SAMPLE_PERIOD_S * 1000), n_intervals=0),
        ],
    )


# ------------------------------------------------------------------
# Performance page
# ------------------------------------------------------------------
def _performance_tab() -> dcc.Tab:
    return dcc.Tab(
        label="Performances",
        value="perf",
        children=[
            html.Div(
                [
                    # Left: uploads + selection -----------------------------
                    html.Div(
                        [
                            dcc.Upload(
                                id="upload",
                                children=html.Div("📂 Charger un ou plusieurs fichiers Excel"),
                                accept=",".join(config.ACCEPTED_EXTENSIONS),
                                multiple=True,
                                style={
                                    "border": "1px dashed #3b82f6",
                                    "borderRadius": "8px",
                                    "padding": "0.75rem",
                                    "textAlign": "center",
                                    "cursor": "pointer",
                                    "marginBottom": "0.5rem",
                                },
                            ),
                            html.Div(id="upload-status", style={"fontSize": "0.8rem", "marginBottom": "0.5rem"}),
                            html.Div(id="selection-panel"),
                        ],
                        style={"overflowY": "auto", "maxHeight": "85vh", "paddingRight": "0.5rem"},
                    ),

                    # Right: chart -----------------------------------------
                    html.Div(
                        [
                            html.Div(
                                [
                                    html.Div("Évolution des indicateurs sélectionnés", style={"fontWeight": "bold"}),
                                    html.Div(
                                        [
                                            html.Span(id="zoom-badge", n_clicks=0, style={"display": "none"}),
                                            html.Span(id="zoom-hint", style={"fontSize": "0.8rem", "color": "#777"}),
                                        ]
                                    ),
                                ],
                                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
                            ),
                            html.Div(
                                "Chargez un fichier Excel et sélectionnez des indicateurs pour afficher les courbes",
                                id="perf-empty",
                                style={"textAlign": "center", "color": "#777", "marginTop": "4rem"},
                            ),
                            dcc.Graph(
                                id="perf-graph",
                                figure=go.Figure(),
                                config={"displaylogo": False},
                                style={"height": "75vh", "display": "none"},
                            ),
                        ]
                    ),
                ],
                style={"display": "grid", "gridTemplateColumns": "300px 1fr", "gap": "1rem", "marginTop": "1rem"},
            ),
        ],
    )


def _selected_range(selected_data: Optional[Dict[str, Any]]) -> Optional[List[Any]]:
    if not selected_data:
        return None
    x_range = (selected_data.get("range") or {}).get("x")
    if not x_range or len(x_range) != 2:
        return None
    return x_range


def _is_autorange(relayout: Optional[Dict[str, Any]]) -> bool:
    return bool(relayout) and bool(relayout.get("xaxis.autorange"))


def _upload_status(results) -> List[html.Div]:
    return [
        html.Div(f"✓ {r.filename}" if r.ok else f"✗ {r.error}",
                 style={"color": "#06a77d" if r.ok else "#c0392b"})
        for r in results
    ]


def dispatch(state: session.SessionState, prop_id: str, trigger: Any, value: Any,
             contents: Optional[List[str]] = None,
             filenames: Optional[List[str]] = None) -> Tuple[session.SessionState, Any]:
    """
    Map the input that fired the performance callback to a session event.

    Returns the new state and the upload status children (dash.no_update
    unless files were uploaded). Raises PreventUpdate when the event changes
    nothing: a panel re-render, an empty selection box, a relayout that is
    not an autorange reset.
    """
    if prop_id == "upload.contents":
        if not contents:
            raise PreventUpdate
        results = decode_uploads(filenames or [], contents)
        for result in results:
            if result.ok:
                state = session.add_dataset(state, result.dataset)
        return state, _upload_status(results)

    if isinstance(trigger, dict) and trigger.get("type") == "sel-toggle":
        if not value:
            # panel re-render, not a click
            raise PreventUpdate
        return session.apply_toggle(state, json.loads(trigger["action"])), dash.no_update

    if prop_id == "perf-graph.selectedData":
        x_range = _selected_range(value)
        if x_range is not None:
            return session.zoom_select(state, x_range[0], x_range[1]), dash.no_update
        if value is None and state.zoom.window is not None:
            return session.zoom_reset(state), dash.no_update
        raise PreventUpdate

    if prop_id == "perf-graph.relayoutData":
        if not _is_autorange(value) or state.zoom.window is None:
            raise PreventUpdate
        return session.zoom_reset(state), dash.no_update

    if prop_id == "zoom-badge.n_clicks":
        if not value:
            raise PreventUpdate
        return session.zoom_reset(state), dash.no_update

    raise PreventUpdate


def create_app(live_feed: Optional[LiveFeed] = None) -> Dash:
    app = Dash(__name__)
    app.title = "PerfChart"

    tabs = [_performance_tab()]
    if live_feed is not None:
        tabs.append(_live_tab())

    app.layout = html.Div(
        [
            html.Div(
                [
                    html.H1("⚡ PerfChart", style={"margin": 0}),
                    html.Div(id="perf-summary", style={"fontFamily": "monospace", "color": "#555"}),
                ],
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            dcc.Store(id="session-store", data=session.SessionState().to_dict()),
            dcc.Tabs(id="tabs", value="perf", children=tabs),
        ],
        style={"maxWidth": "1400px", "margin": "0 auto", "fontFamily": "sans-serif"},
    )

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    @app.callback(
        [Output("session-store", "data"), Output("upload-status", "children")],
        [
            Input("upload", "contents"),
            Input({"type": "sel-toggle", "section": ALL, "action": ALL}, "n_clicks"),
            Input("perf-graph", "selectedData"),
            Input("perf-graph", "relayoutData"),
            Input("zoom-badge", "n_clicks"),
        ],
        [
            State("upload", "filename"),
            State("session-store", "data"),
        ],
        prevent_initial_call=True,
    )
    def handle_event(contents, _toggles, _selected, _relayout, _badge, filenames, data):
        ctx = dash.callback_context
        if not ctx.triggered:
            raise PreventUpdate

        state, status = dispatch(
            session.SessionState.from_dict(data),
            ctx.triggered[0]["prop_id"],
            ctx.triggered_id,
            ctx.triggered[0]["value"],
            contents=contents,
            filenames=filenames,
        )
        return state.to_dict(), status

    @app.callback(
        [Output("selection-panel", "children"), Output("perf-summary", "children")],
        Input("session-store", "data"),
    )
    def update_selection_panel(data):
        state = session.SessionState.from_dict(data)
        return render_selection_panel(state), summary_text(state)

    @app.callback(
        [
            Output("perf-graph", "figure"),
            Output("perf-graph", "style"),
            Output("perf-empty", "style"),
            Output("zoom-badge", "children"),
            Output("zoom-badge", "style"),
            Output("zoom-hint", "children"),
        ],
        Input("session-store", "data"),
        State("perf-graph", "style"),
    )
    def update_chart(data, graph_style):
        state = session.SessionState.from_dict(data)
        projection = project(state)
        graph_style = dict(graph_style or {})
        empty_style = {"textAlign": "center", "color": "#777", "marginTop": "4rem"}

        if projection.empty:
            graph_style["display"] = "none"
            return go.Figure(), graph_style, empty_style, "", {"display": "none"}, ""

        graph_style["display"] = "block"
        empty_style["display"] = "none"

        label = window_label(state)
        badge_style = {"display": "none"}
        badge = ""
        if label is not None:
            badge = f"🔍 {label}  ✕"
            badge_style = {
                "cursor": "pointer",
                "border": "1px solid #3b82f6",
                "borderRadius": "6px",
                "padding": "2px 8px",
                "marginRight": "0.75rem",
                "fontFamily": "monospace",
                "fontSize": "0.8rem",
                "color": "#3b82f6",
            }
        hint = ZOOM_HINT_IDLE if label is None else ZOOM_HINT_ACTIVE

        return build_figure(projection), graph_style, empty_style, badge, badge_style, hint

    if live_feed is None:
        return app

    @app.callback(
        [Output("live-cards", "children"), Output("live-clock", "children")],
        Input("live-interval", "n_intervals"),
    )
    def update_live_cards(_n: int):
        clock = datetime.now().strftime("%H:%M:%S")
        latest = live_feed.get_latest()
        if latest is None:
            return html.Div("No data yet..."), clock
        return [_stat_card(chart, latest.get(chart["key"])) for chart in config.DEMO_CHARTS], clock

    @app.callback(
        Output("live-graphs", "children"),
        [Input("live-interval", "n_intervals"), Input("live-window", "value")],
    )
    def update_live_graphs(_n: int, window_s: Optional[int]):
        points = int(round((window_s or config.DEFAULT_WINDOW_S) / config.SAMPLE_PERIOD_S))
        history = live_feed.get_history(last_n=points)
        if not history:
            return [html.Div("No data yet...")]

        return [
            dcc.Graph(figure=live_figure(chart, history), id={"type": "live-graph", "key": chart["key"]})
            for chart in config.DEMO_CHARTS
        ]

    return app
