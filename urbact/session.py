# urbact/session.py
"""
Dashboard session state and the controller that owns it.

The population panel follows Idle -> Drawing -> Computing -> Displayed, with
reset returning to Idle. Remote results arrive through continuations tagged
with the session generation they were issued under; a continuation from an
older generation is dropped without touching the view.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Dict, List, Optional

from loguru import logger

from urbact.constants import (
    EAI_VIS, HIGHLIGHT_COLOR, MAX_POLYGONS, POLYGON_COLORS, POPULATION_TITLE,
    POPULATION_VIS, TOP_N_WARDS, VisParams, lookup_vis, variable_label,
)
from urbact.errors import CapacityExceededError, UrbactError
from urbact.legend import LegendSynchronizer, eai_legend, population_legend, variable_legend
from urbact.wards import WardScore, rank_wards


class Panel(str, Enum):
    POPULATION = "population"
    EAI = "eai"


class Phase(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    COMPUTING = "computing"
    DISPLAYED = "displayed"


@dataclass(frozen=True)
class MapLayer:
    name: str
    source: str
    vis: Optional[VisParams] = None
    color: Optional[str] = None
    geometry: Any = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PolygonTicket:
    index: int
    color: str
    generation: int


@dataclass
class ResultPanel:
    index: int
    color: str
    population: float
    histogram: Dict[str, List[float]]

    @property
    def title(self) -> str:
        return f"Polygon {self.index + 1} Results:"

    @property
    def total_label(self) -> str:
        return f"Total Population: {self.population:.0f}"


BOUNDARY_LAYER = MapLayer(name="City Boundary", source="boundary", color="hotpink")
POPULATION_LAYER = MapLayer(name=POPULATION_TITLE, source="population", vis=POPULATION_VIS)
EAI_LAYER = MapLayer(name="EAI Map", source="eai", vis=EAI_VIS)


class DashboardSession:
    """
    Session controller. All state changes go through its methods.

    `backend` provides population_sum, population_histogram and ward_means;
    `runner` is a TaskRunner. Both are only needed for the methods that issue
    remote requests.
    """

    def __init__(self, backend=None, runner=None, max_polygons: int = MAX_POLYGONS,
                 palette=POLYGON_COLORS):
        if len(palette) < max_polygons:
            raise ValueError("Palette needs one colour per allowed polygon")
        self.backend = backend
        self.runner = runner
        self.max_polygons = max_polygons
        self.palette = tuple(palette)

        self.generation = 0
        self.active_panel = Panel.POPULATION
        self.phase = Phase.IDLE
        self.polygon_count = 0
        self.polygon_layers: List[MapLayer] = []
        self.result_panels: List[ResultPanel] = []
        self.selected_variable: Optional[str] = None
        self.ranking: Optional[List[WardScore]] = None
        self.layers: List[MapLayer] = []
        self.legend = LegendSynchronizer()
        self._partial: Dict[int, Dict[str, Any]] = {}

        self.reset_map_layers(is_pop_panel=True)

    # -- derived --------------------------------------------------------

    @property
    def drawing_enabled(self) -> bool:
        return len(self.polygon_layers) < self.max_polygons

    @property
    def computing(self) -> int:
        return len(self._partial)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "panel": self.active_panel,
            "phase": self.phase,
            "polygon_count": self.polygon_count,
            "polygons": [l.name for l in self.polygon_layers],
            "results": [p.index for p in self.result_panels],
            "layers": [l.name for l in self.layers],
            "legend": self.legend.active,
            "variable": self.selected_variable,
            "drawing_enabled": self.drawing_enabled,
        }

    # -- layers ---------------------------------------------------------

    def reset_map_layers(self, is_pop_panel: bool, show_eai: bool = True) -> None:
        """Rebuild the layer stack from the boundary up, and the legend with it."""
        self.layers = [BOUNDARY_LAYER]
        if is_pop_panel:
            self.layers.append(POPULATION_LAYER)
            self.legend.show(population_legend())
            self.layers.extend(self.polygon_layers)
        elif show_eai:
            self.layers.append(EAI_LAYER)
            self.legend.show(eai_legend())

    # -- population panel -----------------------------------------------

    def request_draw(self) -> None:
        if not self.drawing_enabled:
            logger.info(f"Draw rejected: {len(self.polygon_layers)}/{self.max_polygons} polygons")
            raise CapacityExceededError(self.max_polygons)
        self.phase = Phase.DRAWING

    def complete_polygon(self, geometry) -> PolygonTicket:
        if self.phase != Phase.DRAWING:
            raise UrbactError("Click 'Draw Polygon' before submitting a polygon.")
        if not self.drawing_enabled:
            raise CapacityExceededError(self.max_polygons)

        index = len(self.polygon_layers)
        color = self.palette[index]
        layer = MapLayer(name=f"Polygon {index + 1}", source="polygon", color=color, geometry=geometry)
        self.polygon_layers.append(layer)
        if self.active_panel == Panel.POPULATION:
            self.layers.append(layer)

        self._partial[index] = {}
        self.phase = Phase.COMPUTING
        return PolygonTicket(index=index, color=color, generation=self.generation)

    def submit_polygon(self, geometry) -> PolygonTicket:
        """Complete the polygon and issue its zonal sum and histogram requests."""
        ticket = self.complete_polygon(geometry)
        self.runner.issue(self.backend.population_sum, geometry,
                          generation=ticket.generation,
                          on_result=partial(self.deliver_population, ticket),
                          label=f"population_sum[{ticket.index}]")
        self.runner.issue(self.backend.population_histogram, geometry,
                          generation=ticket.generation,
                          on_result=partial(self.deliver_histogram, ticket),
                          label=f"population_histogram[{ticket.index}]")
        return ticket

    def deliver_population(self, ticket: PolygonTicket, value: float) -> bool:
        return self._deliver(ticket, "population", float(value or 0.0))

    def deliver_histogram(self, ticket: PolygonTicket, histogram: Dict[str, List[float]]) -> bool:
        return self._deliver(ticket, "histogram", histogram)

    def _is_stale(self, generation: int, what: str) -> bool:
        if generation != self.generation:
            logger.debug(f"Dropping {what} from generation {generation} (now {self.generation})")
            return True
        return False

    def _deliver(self, ticket: PolygonTicket, key: str, value) -> bool:
        if self._is_stale(ticket.generation, f"{key} for polygon {ticket.index + 1}"):
            return False
        parts = self._partial.get(ticket.index)
        if parts is None:
            return False
        parts[key] = value
        if "population" not in parts or "histogram" not in parts:
            return True

        del self._partial[ticket.index]
        self.result_panels.append(ResultPanel(
            index=ticket.index,
            color=ticket.color,
            population=parts["population"],
            histogram=parts["histogram"],
        ))
        self.polygon_count += 1

        # the user may already be drawing the next polygon
        if self.phase == Phase.DRAWING:
            return True
        if self._partial:
            self.phase = Phase.COMPUTING
        elif self.polygon_count >= self.max_polygons:
            self.phase = Phase.IDLE
        else:
            self.phase = Phase.DISPLAYED
        return True

    def _discard_polygons(self) -> None:
        if self.polygon_layers or self.result_panels or self._partial:
            self.generation += 1
        self.polygon_layers = []
        self.result_panels = []
        self._partial = {}
        self.polygon_count = 0
        self.phase = Phase.IDLE

    def reset(self) -> None:
        """Clear polygons and results and restore the population layer."""
        self._discard_polygons()
        self.reset_map_layers(is_pop_panel=True)

    # -- panel switching --------------------------------------------------

    def show_panel(self, panel: Panel) -> None:
        self._discard_polygons()
        self.generation += 1
        self.active_panel = Panel(panel)
        self.ranking = None
        self.selected_variable = None
        self.reset_map_layers(is_pop_panel=self.active_panel == Panel.POPULATION)

    # -- EAI panel ------------------------------------------------------

    def request_ward_ranking(self, prop: Optional[str] = None):
        """Issue the ward zonal-mean request; the chart is cleared until it resolves."""
        self.ranking = None
        generation = self.generation
        return self.runner.issue(self.backend.ward_means, prop,
                                 generation=generation,
                                 on_result=partial(self.deliver_ward_means, generation),
                                 label="ward_means")

    def deliver_ward_means(self, generation: int, records) -> bool:
        if self._is_stale(generation, "ward means"):
            return False
        self.ranking = rank_wards(records, TOP_N_WARDS)
        self.reset_map_layers(is_pop_panel=False)
        self.layers.append(MapLayer(
            name=f"Top {TOP_N_WARDS} Wards",
            source="top_wards",
            color=HIGHLIGHT_COLOR,
            params={"ward_ids": [w.ward_id for w in self.ranking]},
        ))
        return True

    def select_variable(self, variable: Optional[str]) -> None:
        """Replace the current overlay and legend with a single contributing variable."""
        if not variable:
            return
        # a ward ranking still in flight would redraw the EAI overlay over this one
        self.generation += 1
        self.selected_variable = variable
        self.reset_map_layers(is_pop_panel=False, show_eai=False)
        self.layers.append(MapLayer(
            name=f"{variable_label(variable)} Map",
            source="variable",
            vis=lookup_vis(variable),
            params={"property": variable},
        ))
        self.legend.show(variable_legend(variable))

    def return_to_eai(self) -> None:
        self.reset_map_layers(is_pop_panel=False)
