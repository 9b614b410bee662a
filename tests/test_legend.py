"""
Unit tests for urbact.legend and the visualisation tables in urbact.constants.
"""

from urbact.constants import (
    DEFAULT_VARIABLE_VIS, EAI_VIS, POPULATION_VIS, VARIABLE_LABELS, VARIABLE_VIS,
    lookup_vis, variable_choices, variable_label,
)
from urbact.legend import (
    LegendConfig, LegendSynchronizer, eai_legend, population_legend, variable_legend,
)


class TestVisTables:

    def test_every_labelled_variable_has_vis(self):
        assert set(VARIABLE_LABELS) == set(VARIABLE_VIS)

    def test_unknown_variable_falls_back(self):
        vis = lookup_vis("not_a_field")
        assert vis == DEFAULT_VARIABLE_VIS
        assert (vis.min, vis.max) == (0, 100)
        assert vis.palette[0] == "#ffffe5"

    def test_unknown_label_is_field_name(self):
        assert variable_label("not_a_field") == "not_a_field"

    def test_choices_are_label_value_pairs(self):
        choices = variable_choices()
        assert ("Shop POI", "shop_poi") in choices
        assert len(choices) == len(VARIABLE_LABELS)

    def test_to_ee(self):
        assert POPULATION_VIS.to_ee() == {"min": 7, "max": 120, "palette": list(POPULATION_VIS.palette)}


class TestLegendBuilders:

    def test_population(self):
        cfg = population_legend()
        assert cfg.title == "Population Count"
        assert (cfg.min, cfg.max) == (7, 120)

    def test_eai(self):
        cfg = eai_legend()
        assert cfg.title == "Economic Activity Index"
        assert (cfg.min, cfg.max) == (EAI_VIS.min, EAI_VIS.max)

    def test_variable_uses_display_name(self):
        cfg = variable_legend("ndvi_mean")
        assert cfg.title == "NDVI"
        assert cfg.max == 0.65


class TestLegendSynchronizer:

    def test_starts_empty(self):
        legend = LegendSynchronizer()
        assert legend.active is None
        assert legend.render_html() == ""

    def test_show_replaces_whole_config(self):
        legend = LegendSynchronizer()
        legend.show(population_legend())
        legend.show(variable_legend("shop_poi"))
        assert legend.active == LegendConfig.from_vis("Shop POI", VARIABLE_VIS["shop_poi"])
        assert legend.revision == 2

    def test_render_contains_title_and_range(self):
        legend = LegendSynchronizer()
        legend.show(eai_legend())
        html = legend.render_html()
        assert "Economic Activity Index" in html
        assert "-0.5" in html and "1.7" in html
        assert "linear-gradient" in html
