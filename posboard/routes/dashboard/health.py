"""Healthcheck endpoint."""

from __future__ import annotations

from flask import jsonify

from . import bp, get_client, get_live_orders


@bp.route("/health", methods=["GET"])
def health():
    live_orders = get_live_orders()
    return (
        jsonify(
            {
                "ok": True,
                "api_base_url": get_client().base_url,
                "live_orders": live_orders.scheduler.state.value if live_orders else None,
            }
        ),
        200,
    )
