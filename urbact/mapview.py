# urbact/mapview.py

from typing import List

from matplotlib.colors import to_hex

from urbact.analysis import UrbanActivityAnalysis
from urbact.legend import LegendSynchronizer
from urbact.session import MapLayer

MAP_HEIGHT_PX = 700


def _fill(color: str, alpha_hex: str = "33") -> str:
    return to_hex(color).lstrip('#') + alpha_hex


def add_layer(m, analysis: UrbanActivityAnalysis, layer: MapLayer) -> None:
    """Resolve one layer of the session stack to an Earth Engine object and add it to `m`."""
    import ee

    vis = layer.vis.to_ee() if layer.vis else {}
    if layer.source == "boundary":
        obj = analysis.boundary().style(color=layer.color, fillColor='FFFFFF1A', width=2)
    elif layer.source == "population":
        obj = analysis.population()
    elif layer.source == "eai":
        obj = analysis.attribute_image()
    elif layer.source == "variable":
        obj = analysis.attribute_image(layer.params["property"])
    elif layer.source == "polygon":
        obj = ee.FeatureCollection([ee.Feature(layer.geometry)]).style(
            color=to_hex(layer.color).lstrip('#'), fillColor=_fill(layer.color), width=2)
    elif layer.source == "top_wards":
        obj = analysis.ward_outline(layer.params.get("ward_ids", []), to_hex(layer.color).lstrip('#'))
    else:
        raise ValueError(f"Unknown layer source: {layer.source}")
    m.addLayer(obj, vis, layer.name)


def render_map_html(analysis: UrbanActivityAnalysis, layers: List[MapLayer],
                    legend: LegendSynchronizer) -> str:
    """Folium map of the layer stack, with the active legend overlaid."""
    m = analysis.geemap_map(height=f"{MAP_HEIGHT_PX}px")
    for layer in layers:
        add_layer(m, analysis, layer)
    m.addLayerControl()

    base_html = m._repr_html_()
    base_html = base_html.replace(f'height:{MAP_HEIGHT_PX}px', 'height:100%') \
                         .replace(f'height: {MAP_HEIGHT_PX}px', 'height:100%')

    return f'''
    <div style="position:relative; width:100%; height:{MAP_HEIGHT_PX}px;">
        <div style="position:absolute; top:0; left:0; right:0; bottom:0; height:100% !important;">
            {base_html}
        </div>
        {legend.render_html()}
    </div>'''
