# urbact/wards.py
"""
Ward ranking by zonal mean of the Economic Activity Index, and the
dashboard's matplotlib charts.

Charts are closed in pyplot before they are returned; the caller owns the figure.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Union

import matplotlib.pyplot as plt
import pandas as pd

from urbact.constants import POLYGON_COLORS, TOP_N_WARDS

NO_DATA_MESSAGE = "No ward data available for chart generation."


@dataclass(frozen=True)
class WardScore:
    ward_id: Any
    value: float


@dataclass(frozen=True)
class NoDataIndicator:
    """Stands in for a chart when there is nothing to plot."""
    message: str = NO_DATA_MESSAGE

    def to_html(self) -> str:
        return f"<div style='color:red; font-style:italic; padding:8px 0;'>{self.message}</div>"


def _has_value(value) -> bool:
    if value is None:
        return False
    try:
        return not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def rank_wards(records: Iterable[Dict[str, Any]], limit: int = TOP_N_WARDS) -> List[WardScore]:
    """
    Top `limit` wards by value, descending.
    Wards without a value are left out. Ties are broken by ward id so the order
    is the same on every run.
    """
    rows = [
        {"ward_id": r.get("ward_id"), "value": float(r["value"])}
        for r in records if _has_value(r.get("value"))
    ]
    if not rows:
        return []
    df = pd.DataFrame(rows)
    df["_key"] = df["ward_id"].astype(str)
    df = df.sort_values(["value", "_key"], ascending=[False, True], kind="mergesort").head(limit)
    # index back into rows so ids keep their original python type
    return [WardScore(ward_id=rows[i]["ward_id"], value=rows[i]["value"]) for i in df.index]


def ranking_chart(ranking: List[WardScore], title: str = "Top 10 Wards by EAI") -> Union[plt.Figure, NoDataIndicator]:
    """Bar chart of the ranking, or a NoDataIndicator when the ranking is empty."""
    if not ranking:
        return NoDataIndicator()

    labels = [str(w.ward_id) for w in ranking]
    values = [w.value for w in ranking]

    fig, ax = plt.subplots(figsize=(6, 3.2))
    ax.bar(labels, values, color=POLYGON_COLORS[0])
    ax.set_title(title, fontsize=10)
    ax.set_xlabel("Ward ID")
    ax.set_ylabel("Average EAI")
    ax.tick_params(axis='x', rotation=45, labelsize=7)
    ax.grid(axis='y', linestyle=':', alpha=0.5)
    fig.tight_layout()
    plt.close(fig)
    return fig


def histogram_chart(bucket_means: List[float], counts: List[float], color: str,
                    title: str) -> plt.Figure:
    """Bar histogram of population per cell for one polygon."""
    fig, ax = plt.subplots(figsize=(5, 2.6))
    if bucket_means:
        width = (bucket_means[1] - bucket_means[0]) if len(bucket_means) > 1 else 1.0
        ax.bar(bucket_means, counts, width=width * 0.9, color=color)
    ax.set_title(title, fontsize=9)
    ax.set_xlabel("Population Count")
    ax.set_ylabel("Frequency")
    ax.grid(axis='y', linestyle=':', alpha=0.5)
    fig.tight_layout()
    plt.close(fig)
    return fig
