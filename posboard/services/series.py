"""Chart-ready series built from raw analytics records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .periods import format_period

PALETTE_SIZE = 6

# Overview chart metrics, in dataset order.
OVERVIEW_METRICS: Dict[str, str] = {
    "total_sales": "Sales",
    "total_expenses": "Expenses",
    "total_profits": "Profits",
    "total_orders": "Orders",
}


def _json_number(value: float) -> Optional[float]:
    return None if value is None or math.isnan(value) else float(value)


@dataclass
class Series:
    labels: List[str] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        # NaN is not valid JSON; charts treat null as a gap.
        return {"labels": list(self.labels), "values": [_json_number(v) for v in self.values]}


@dataclass
class Dataset:
    entity_name: str
    data: List[float]
    color_index: int

    def to_dict(self, palette: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "entity_name": self.entity_name,
            "data": list(self.data),
            "color_index": self.color_index,
        }
        if palette:
            out["color"] = palette[self.color_index % len(palette)]
        return out


@dataclass
class PivotSeries:
    labels: List[str] = field(default_factory=list)
    datasets: List[Dataset] = field(default_factory=list)

    def to_dict(self, palette: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        return {
            "labels": list(self.labels),
            "datasets": [ds.to_dict(palette) for ds in self.datasets],
        }


def _first(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def build_series(
    records: Iterable[Mapping[str, Any]],
    interval: str,
    value_key: str = "total",
) -> Series:
    """
    Project period records into one labelled series.

    Input order is kept as-is (the API returns periods chronologically).
    Values are coerced with ``pd.to_numeric``; anything non-numeric becomes
    NaN rather than a silent zero.
    """
    rows = [r for r in (records or []) if isinstance(r, Mapping)]
    if not rows:
        return Series()

    periods = [_first(r, ("period", "date")) for r in rows]
    raw_values = [_first(r, (value_key, "total", "total_sales", "sales")) for r in rows]
    values = pd.to_numeric(pd.Series(raw_values, dtype=object), errors="coerce")

    return Series(
        labels=[format_period(p, interval) for p in periods],
        values=[float(v) for v in values],
    )


def build_pivot(
    records: Iterable[Mapping[str, Any]],
    interval: str,
    palette_size: int = PALETTE_SIZE,
) -> PivotSeries:
    """
    Turn (period, entity, value) triples into one dense series per entity.

    Periods and entities keep first-seen order. A (period, entity) pair with
    no record is 0. Entity ``i`` gets colour index ``i % palette_size``.
    """
    if palette_size < 1:
        raise ValueError("palette_size must be at least 1")

    rows = [r for r in (records or []) if isinstance(r, Mapping)]
    if not rows:
        return PivotSeries()

    frame = pd.DataFrame(
        {
            "period": [str(_first(r, ("period", "date"))) for r in rows],
            "entity_name": [str(_first(r, ("entity_name", "product_name", "name"))) for r in rows],
            "value": pd.to_numeric(
                pd.Series([_first(r, ("value", "total_revenue")) for r in rows], dtype=object),
                errors="coerce",
            ),
        }
    )

    periods = list(pd.unique(frame["period"]))
    entities = list(pd.unique(frame["entity_name"]))

    matrix = (
        frame.groupby(["entity_name", "period"], sort=False)["value"]
        .sum()
        .unstack("period")
        .reindex(index=entities, columns=periods)
        .fillna(0.0)
    )

    datasets = [
        Dataset(
            entity_name=entity,
            data=[float(v) for v in matrix.loc[entity].tolist()],
            color_index=i % palette_size,
        )
        for i, entity in enumerate(entities)
    ]
    return PivotSeries(
        labels=[format_period(p, interval) for p in periods],
        datasets=datasets,
    )


def build_overview(
    records: Iterable[Mapping[str, Any]],
    interval: str,
    metrics: Optional[Mapping[str, str]] = None,
    palette_size: int = PALETTE_SIZE,
) -> PivotSeries:
    """Sales/expenses/profits/orders per period as one dataset per metric."""
    metrics = dict(OVERVIEW_METRICS if metrics is None else metrics)
    rows = [r for r in (records or []) if isinstance(r, Mapping)]
    if not rows or not metrics:
        return PivotSeries()

    wide = pd.DataFrame({"period": [str(_first(r, ("period", "date"))) for r in rows]})
    for key in metrics:
        raw = pd.Series([r.get(key) for r in rows], dtype=object)
        wide[key] = pd.to_numeric(raw, errors="coerce").fillna(0.0)

    long = wide.melt(id_vars="period", value_vars=list(metrics), var_name="metric")
    triples = [
        {"period": row.period, "entity_name": metrics[row.metric], "value": row.value}
        for row in long.itertuples(index=False)
    ]
    return build_pivot(triples, interval, palette_size=palette_size)


def build_ranking(
    products: Iterable[Mapping[str, Any]],
    label_key: str = "product_name",
    value_key: str = "total_quantity",
) -> Series:
    """Best/least selling product lists as a bar series."""
    rows = [r for r in (products or []) if isinstance(r, Mapping)]
    if not rows:
        return Series()
    values = pd.to_numeric(pd.Series([r.get(value_key) for r in rows], dtype=object), errors="coerce")
    return Series(
        labels=[str(r.get(label_key) or "N/A") for r in rows],
        values=[float(v) for v in values],
    )


__all__ = [
    "Dataset",
    "OVERVIEW_METRICS",
    "PALETTE_SIZE",
    "PivotSeries",
    "Series",
    "build_overview",
    "build_pivot",
    "build_ranking",
    "build_series",
]
