"""Live ready-orders endpoints."""

from __future__ import annotations

from collections.abc import Mapping

from flask import jsonify, request

from . import bp, get_live_orders


def _feed_or_404():
    feed = get_live_orders()
    if feed is None:
        return None, (jsonify({"error": "LiveOrdersDisabled", "message": "Live orders are not enabled."}), 404)
    return feed, None


@bp.route("/api/orders/ready", methods=["GET"])
def ready_orders():
    feed, error = _feed_or_404()
    if error:
        return error
    page = request.args.get("page", default=1, type=int)
    return jsonify(feed.snapshot(page=page))


@bp.route("/api/orders/ready/filters", methods=["POST"])
def update_ready_filters():
    """Apply a filter edit; the feed re-fetches once edits go quiet."""
    feed, error = _feed_or_404()
    if error:
        return error
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, Mapping):
        return jsonify({"error": "InvalidPayload", "message": "Filter update must be a JSON object."}), 400
    if payload.get("clear"):
        filters = feed.clear_filters()
    else:
        filters = feed.update_filters(payload)
    return jsonify({"filters": filters.to_dict()})
