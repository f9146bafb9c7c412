"""Shared helper functions for dashboard routes."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable

from flask import current_app

from posboard.services.pipelines import Pipeline
from posboard.utils.filter_state import FilterState


def build_filters(args) -> FilterState:
    """Build a validated ``FilterState`` from request args.

    Raises ``ValidationError``; the blueprint turns it into a 400 response.
    """
    base = FilterState.reset(limit=int(current_app.config.get("DEFAULT_LIMIT", 5)))
    today = date.today() if current_app.config.get("REJECT_FUTURE_END_DATE") else None
    return FilterState.from_args(args, base=base, today=today)


def run_pipelines(pipelines: Iterable[Pipeline], filters: FilterState) -> Dict[str, Any]:
    """Refresh each pipeline and merge the payloads; errors are reported per panel."""
    payload: Dict[str, Any] = {"filters": filters.to_dict(), "errors": {}}
    for pipeline in pipelines:
        pipeline.refresh(filters)
        payload.update(pipeline.result)
        if pipeline.error:
            payload["errors"][pipeline.name] = pipeline.error
    return payload


__all__ = ["build_filters", "run_pipelines"]
