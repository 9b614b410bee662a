# urbact/legend.py

from dataclasses import dataclass
from typing import Optional, Tuple

from urbact.constants import (
    EAI_TITLE, EAI_VIS, POPULATION_TITLE, POPULATION_VIS, VisParams, lookup_vis, variable_label,
)


@dataclass(frozen=True)
class LegendConfig:
    title: str
    min: float
    max: float
    palette: Tuple[str, ...]

    @classmethod
    def from_vis(cls, title: str, vis: VisParams) -> "LegendConfig":
        return cls(title=title, min=vis.min, max=vis.max, palette=tuple(vis.palette))


def population_legend() -> LegendConfig:
    return LegendConfig.from_vis(POPULATION_TITLE, POPULATION_VIS)


def eai_legend() -> LegendConfig:
    return LegendConfig.from_vis(EAI_TITLE, EAI_VIS)


def variable_legend(variable: str) -> LegendConfig:
    return LegendConfig.from_vis(variable_label(variable), lookup_vis(variable))


def _fmt(value: float) -> str:
    return f"{value:g}"


class LegendSynchronizer:
    """
    Holds the single active legend. `show()` replaces the whole configuration;
    there is no way to patch a title or range in place.
    """

    def __init__(self):
        self._active: Optional[LegendConfig] = None
        self.revision = 0

    @property
    def active(self) -> Optional[LegendConfig]:
        return self._active

    def show(self, config: LegendConfig) -> LegendConfig:
        self._active = config
        self.revision += 1
        return config

    def render_html(self) -> str:
        cfg = self._active
        if cfg is None:
            return ""
        colors = cfg.palette
        gradient = ', '.join(f'{c} {i / (len(colors) - 1) * 100:.0f}%' for i, c in enumerate(colors))
        return f'''
        <div style="position:absolute; bottom:30px; left:15px; z-index:1000;
                    padding:8px 15px; background:rgba(255,255,255,0.92); border:1px solid #999;
                    border-radius:4px; font-family:Arial,sans-serif; box-shadow:0 2px 6px rgba(0,0,0,0.2);">
          <div style="font-weight:bold; font-size:14px; color:#333; margin-bottom:4px;">{cfg.title}</div>
          <div style="background:linear-gradient(to right, {gradient}); height:12px; width:160px;
                      border:1px solid #666;"></div>
          <div style="display:flex; justify-content:space-between; font-size:12px; color:#333; margin-top:2px;">
            <span>{_fmt(cfg.min)}</span><span>{_fmt(cfg.max)}</span>
          </div>
        </div>'''
