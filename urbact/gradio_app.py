# urbact/gradio_app.py
"""
Urban Activities Gradio Application
Population aggregation over drawn polygons and Economic Activity Index exploration.
"""

from typing import Optional

import gradio as gr
from loguru import logger

from urbact.analysis import UrbanActivityAnalysis
from urbact.constants import (
    HIGHLIGHT_COLOR, MAX_POLYGONS, NOTIFICATION_SECONDS, variable_choices,
)
from urbact.converters import PolygonLoader
from urbact.errors import CapacityExceededError, InvalidGeometryError, UrbactError
from urbact.mapview import MAP_HEIGHT_PX, render_map_html
from urbact.service import CityService
from urbact.session import DashboardSession, Panel, Phase, ResultPanel
from urbact.settings import configure_logging, get_settings
from urbact.tasks import TaskRunner
from urbact.wards import NoDataIndicator, histogram_chart, ranking_chart

settings = get_settings()
configure_logging(settings.log_level)
service = CityService(settings.registry_path)

POLL_SECONDS = 0.5

PLACEHOLDER_MAP = f"""
<div style="width:100%; height:{MAP_HEIGHT_PX}px; background: linear-gradient(135deg, #f8ece8 0%, #f0d9d4 50%, #e8c6c0 100%);
            border-radius: 8px; display: flex; align-items: center; justify-content: center;
            border: 2px dashed #c59a94;">
    <div style="text-align: center; color: #8a5a54;">
        <div style="font-size: 48px; margin-bottom: 16px;">🗺️</div>
        <div style="font-size: 18px; font-weight: 500;">Connect to Earth Engine to load the city</div>
        <div style="font-size: 14px; opacity: 0.7; margin-top: 8px;">Map will appear here</div>
    </div>
</div>
"""

INSTRUCTIONS = (
    "This app helps analyze urban development patterns and population distribution in the city.\n\n"
    "The **Population Aggregation Function** allows you to draw polygons and compare population "
    "statistics between different areas. The **Economic Activity Index (EAI)** exploration feature "
    "lets you examine the current economic activity levels across the city's wards.\n\n"
    "Select a function below to begin your analysis."
)

DRAW_HELP = (
    "Draw a polygon with the map's polygon tool, press **Export** on the map to save it as "
    "GeoJSON, then paste the GeoJSON below and click **Finish Polygon**."
)


def _histogram_figure(panel: ResultPanel):
    return histogram_chart(panel.histogram.get("bucket_means", []),
                           panel.histogram.get("counts", []),
                           panel.color,
                           f"Population Distribution - Polygon {panel.index + 1}")


def _result_html(panel: ResultPanel) -> str:
    return f"""
    <div style="margin:10px 0; padding:5px; border:1px solid {panel.color}; background:rgba(255,255,255,0.8);">
      <div style="font-weight:bold; color:{panel.color};">{panel.title}</div>
      <div>{panel.total_label}</div>
    </div>"""


def _status(session: DashboardSession) -> str:
    if session.active_panel == Panel.EAI:
        if session.runner.pending_for(session.generation):
            return "Computing ward statistics..."
        return ""
    if session.phase == Phase.DRAWING:
        return DRAW_HELP
    if session.computing:
        return f"Computing population for {session.computing} polygon(s)..."
    if not session.drawing_enabled:
        return f"Maximum of {MAX_POLYGONS} polygons reached. Reset to draw new polygons."
    return f"Draw up to {MAX_POLYGONS} polygons on the map to compare population statistics."


def _view(session: DashboardSession):
    """Every output component, in VIEW order, rendered from the session."""
    on_pop = session.active_panel == Panel.POPULATION

    results = []
    for i in range(MAX_POLYGONS):
        if i < len(session.result_panels):
            panel = session.result_panels[i]
            results += [gr.update(value=_result_html(panel), visible=True),
                        gr.update(value=_histogram_figure(panel), visible=True)]
        else:
            results += [gr.update(value="", visible=False), gr.update(value=None, visible=False)]

    if session.ranking is None:
        chart = gr.update(value=None, visible=False)
        chart_msg = gr.update(value="", visible=False)
    else:
        rendered = ranking_chart(session.ranking)
        note = session.backend.city.heritage_note
        note_html = (f"<div style='font-size:12px; font-style:italic; color:#666;'>{note}</div>"
                     if note else "")
        if isinstance(rendered, NoDataIndicator):
            chart = gr.update(value=None, visible=False)
            chart_msg = gr.update(value=rendered.to_html() + note_html, visible=True)
        else:
            chart = gr.update(value=rendered, visible=True)
            chart_msg = gr.update(value=note_html, visible=bool(note_html))

    return (
        session,
        render_map_html(session.backend, session.layers, session.legend),
        gr.update(visible=on_pop),
        gr.update(visible=not on_pop),
        gr.update(interactive=session.drawing_enabled),
        gr.update(visible=session.phase == Phase.DRAWING),
        _status(session),
        *results,
        chart,
        chart_msg,
        gr.update(value=session.selected_variable),
    )


def _require(session: Optional[DashboardSession]) -> DashboardSession:
    if session is None:
        raise gr.Error("Please connect to Earth Engine first.")
    return session


def connect(project_id: str, city_code: str, session: Optional[DashboardSession]):
    if not project_id or not project_id.strip():
        raise gr.Error("Please enter your Google Cloud Project ID.")
    if not city_code:
        raise gr.Error("Please select a city.")

    city = service.get_city(city_code)
    analysis = UrbanActivityAnalysis(project_id.strip(), city)
    try:
        analysis.initialize_ee()
    except RuntimeError as e:
        raise gr.Error(f"Earth Engine Init Failed: {e}")

    if session is not None:
        session.runner.shutdown()
    session = DashboardSession(backend=analysis, runner=TaskRunner())
    session.show_panel(Panel.POPULATION)
    logger.info(f"Dashboard session started for {city.name}")
    return _view(session)


def show_population_panel(session):
    session = _require(session)
    session.show_panel(Panel.POPULATION)
    return _view(session)


def show_eai_panel(session):
    session = _require(session)
    session.show_panel(Panel.EAI)
    return _view(session)


def start_drawing(session):
    session = _require(session)
    try:
        session.request_draw()
    except CapacityExceededError as e:
        gr.Warning(str(e), duration=NOTIFICATION_SECONDS)
    return _view(session)


def finish_polygon(geojson_text: str, session):
    session = _require(session)
    try:
        gdf = PolygonLoader.from_geojson(geojson_text)
    except InvalidGeometryError as e:
        raise gr.Error(str(e))
    try:
        session.submit_polygon(session.backend.geopandas_to_ee(gdf))
    except CapacityExceededError as e:
        gr.Warning(str(e), duration=NOTIFICATION_SECONDS)
    except UrbactError as e:
        raise gr.Error(str(e))
    return (*_view(session), "")


def reset_polygons(session):
    session = _require(session)
    session.reset()
    return _view(session)


def aggregate_wards(session):
    session = _require(session)
    session.request_ward_ranking()
    return _view(session)


def _unchanged(session):
    return (session, *(gr.update() for _ in range(VIEW_SIZE - 1)))


def select_variable(variable, session):
    if session is None or not variable:
        return _unchanged(session)
    session.select_variable(variable)
    return _view(session)


def return_to_eai(session):
    session = _require(session)
    session.return_to_eai()
    return _view(session)


def poll_results(session):
    """Run the continuations of finished remote requests and re-render if anything changed."""
    if session is None or not session.runner.pending:
        return _unchanged(session)
    if session.runner.drain() == 0:
        return _unchanged(session)
    return _view(session)


VIEW_SIZE = 7 + 2 * MAX_POLYGONS + 3

CUSTOM_CSS = f"""
.urbact-title {{ color: {HIGHLIGHT_COLOR}; }}
"""

with gr.Blocks(title="Urban Activities Analysis", css=CUSTOM_CSS) as app:
    session_state = gr.State(None)

    gr.Markdown("# Urban Activities Analysis App", elem_classes=["urbact-title"])

    with gr.Row():
        with gr.Column(scale=1, min_width=360):
            gr.Markdown("Welcome!\n\n" + INSTRUCTIONS)

            project_id_input = gr.Textbox(
                label="Google Cloud Project ID",
                placeholder="e.g., my-gcp-project-123",
                value=settings.project_id,
                info="Required: Your GCP project with Earth Engine API enabled." if not settings.project_id
                else "Pre-configured from environment."
            )
            cities = service.get_available_cities()
            city_dd = gr.Dropdown(
                choices=cities,
                value=settings.city if settings.city in service.registry else None,
                label="City",
                interactive=True,
            )
            connect_btn = gr.Button("Connect", variant="primary")

            with gr.Row():
                pop_btn = gr.Button("Population Aggregation Function", size="sm")
                eai_btn = gr.Button("Explore Economic Activity Index", size="sm")

            with gr.Group(visible=True) as pop_group:
                status_md = gr.Markdown(f"Draw up to {MAX_POLYGONS} polygons on the map to compare population statistics.")
                with gr.Row():
                    draw_btn = gr.Button("📐  Draw Polygon", size="sm")
                    reset_btn = gr.Button("Reset Polygons", size="sm")
                with gr.Group(visible=False) as geojson_group:
                    geojson_in = gr.Textbox(label="Polygon GeoJSON", lines=4,
                                            placeholder='{"type": "FeatureCollection", "features": [...]}')
                    finish_btn = gr.Button("Finish Polygon", size="sm", variant="primary")
                result_slots = []
                for _ in range(MAX_POLYGONS):
                    result_slots.append(gr.HTML(visible=False))
                    result_slots.append(gr.Plot(visible=False, show_label=False))

            with gr.Group(visible=False) as eai_group:
                gr.Markdown("Explore Economic Activity Index across the city's wards")
                aggregate_btn = gr.Button("Aggregate EAI to Wards", size="sm")
                chart_plot = gr.Plot(visible=False, show_label=False)
                chart_msg = gr.HTML(visible=False)
                variable_dd = gr.Dropdown(
                    choices=variable_choices(),
                    value=None,
                    label="Select Variable Contributing to EAI to Visualize:",
                    interactive=True,
                )
                return_btn = gr.Button("Return to EAI Map", size="sm")

        with gr.Column(scale=3):
            map_out = gr.HTML(value=PLACEHOLDER_MAP, elem_id="map-container")

    view_outputs = [
        session_state, map_out, pop_group, eai_group, draw_btn, geojson_group, status_md,
        *result_slots, chart_plot, chart_msg, variable_dd,
    ]

    timer = gr.Timer(POLL_SECONDS)
    timer.tick(poll_results, inputs=[session_state], outputs=view_outputs)

    connect_btn.click(connect, inputs=[project_id_input, city_dd, session_state], outputs=view_outputs)
    pop_btn.click(show_population_panel, inputs=[session_state], outputs=view_outputs)
    eai_btn.click(show_eai_panel, inputs=[session_state], outputs=view_outputs)
    draw_btn.click(start_drawing, inputs=[session_state], outputs=view_outputs)
    finish_btn.click(finish_polygon, inputs=[geojson_in, session_state], outputs=[*view_outputs, geojson_in])
    reset_btn.click(reset_polygons, inputs=[session_state], outputs=view_outputs)
    aggregate_btn.click(aggregate_wards, inputs=[session_state], outputs=view_outputs)
    variable_dd.input(select_variable, inputs=[variable_dd, session_state], outputs=view_outputs)
    return_btn.click(return_to_eai, inputs=[session_state], outputs=view_outputs)

app.queue(default_concurrency_limit=1)

if __name__ == "__main__":
    app.launch(show_error=True)
