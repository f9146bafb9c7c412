"""Chart data endpoints."""

from __future__ import annotations

from flask import jsonify, request

from posboard.services.pipelines import dashboard_pipelines

from . import bp, get_client, get_palette
from .helpers import build_filters, run_pipelines


def _pipelines():
    return dashboard_pipelines(get_client(), get_palette())


@bp.route("/api/sales", methods=["GET"])
def sales_data():
    """Sales-over-time series plus the sales summary cards."""
    filters = build_filters(request.args)
    return jsonify(run_pipelines([_pipelines()["sales"]], filters))


@bp.route("/api/products", methods=["GET"])
def products_data():
    """Revenue per product per period, and best/least selling rankings."""
    filters = build_filters(request.args)
    return jsonify(run_pipelines([_pipelines()["products"]], filters))


@bp.route("/api/overview", methods=["GET"])
def overview_data():
    filters = build_filters(request.args)
    pipelines = _pipelines()
    return jsonify(run_pipelines([pipelines["overview"], pipelines["statistics"]], filters))


@bp.route("/api/dashboard", methods=["GET"])
def dashboard_data():
    """Sales and products panels side by side; each fails independently."""
    filters = build_filters(request.args)
    pipelines = _pipelines()
    panels = {}
    for name in ("sales", "products"):
        pipeline = pipelines[name]
        pipeline.refresh(filters)
        panels[name] = pipeline.to_dict()
    return jsonify({"filters": filters.to_dict(), **panels})


@bp.route("/api/orders", methods=["GET"])
def orders_data():
    """Order counts over time with top and least selling products by quantity."""
    filters = build_filters(request.args)
    return jsonify(run_pipelines([_pipelines()["orders"]], filters))


@bp.route("/api/profits", methods=["GET"])
def profits_data():
    filters = build_filters(request.args)
    return jsonify(run_pipelines([_pipelines()["profits"]], filters))


@bp.route("/api/expenses", methods=["GET"])
def expenses_data():
    """Expenses per category per period, the category totals and this month's total."""
    filters = build_filters(request.args)
    return jsonify(run_pipelines([_pipelines()["expenses"]], filters))
