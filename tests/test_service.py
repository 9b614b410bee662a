"""
Unit tests for urbact.service.

Checks the shipped cities.json and the registry behaviour on small temporary files.
"""

import json

import pytest

from urbact.service import CityConfig, CityService

REQUIRED = {
    "name": "São Paulo",
    "aoi_asset": "projects/x/assets/aoi",
    "population_asset": "projects/x/assets/pop",
    "eai_asset": "projects/x/assets/eai",
    "ward_asset": "projects/x/assets/wards",
}


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / "cities.json"
    path.write_text(json.dumps({"sp": dict(REQUIRED, center=[-46.6, -23.5], custom_key=1)}),
                    encoding="utf-8")
    return path


class TestShippedRegistry:

    def test_every_city_loads(self, registry_config, project_root):
        service = CityService(str(project_root / "cities.json"))
        for code in registry_config:
            city = service.get_city(code)
            assert city.code == code
            assert city.name

    def test_jaipur_assets(self, project_root):
        city = CityService(str(project_root / "cities.json")).get_city("jaipur")
        assert city.population_band == "b1"
        assert city.eai_property == "EPI_o"
        assert city.export_crs == "EPSG:32643"
        assert city.heritage_note == "H means Jaipur Heritage Area"
        assert city.center == (75.7873, 26.9124)


class TestCityService:

    def test_available_cities(self, registry_file):
        service = CityService(str(registry_file))
        assert service.get_available_cities() == [("São Paulo", "sp")]

    def test_unknown_city(self, registry_file):
        with pytest.raises(ValueError, match="not found"):
            CityService(str(registry_file)).get_city("atlantis")

    def test_missing_registry_is_empty(self, tmp_path):
        service = CityService(str(tmp_path / "nope.json"))
        assert service.get_available_cities() == []

    def test_unknown_keys_kept_as_extra(self, registry_file):
        city = CityService(str(registry_file)).get_city("sp")
        assert city.extra == {"custom_key": 1}
        assert city.center == (-46.6, -23.5)


class TestCityConfig:

    def test_missing_required_keys(self):
        with pytest.raises(ValueError, match="eai_asset, ward_asset"):
            CityConfig.from_dict("x", {k: v for k, v in REQUIRED.items()
                                       if k not in ("eai_asset", "ward_asset")})

    def test_defaults(self):
        city = CityConfig.from_dict("sp", REQUIRED)
        assert city.export_folder == "dissertation"
        assert city.export_scale == 100
        assert city.ndvi_year == 2024

    def test_slug_is_ascii(self):
        assert CityConfig.from_dict("sp", REQUIRED).slug == "Sao_Paulo"
