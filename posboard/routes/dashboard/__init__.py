"""Dashboard blueprint package."""

from __future__ import annotations

from flask import Blueprint, jsonify

from posboard.utils.filter_state import ValidationError

bp = Blueprint("dashboard", __name__)


def get_client():
    from flask import current_app

    return current_app.extensions["api_client"]


def get_live_orders():
    from flask import current_app

    return current_app.extensions.get("live_orders")


def get_palette():
    from flask import current_app

    return list(current_app.config.get("PALETTE") or [])


@bp.errorhandler(ValidationError)
def handle_validation_error(exc: ValidationError):
    return jsonify(exc.to_dict()), 400


from . import charts, health, orders  # noqa: E402,F401

__all__ = ["bp", "get_client", "get_live_orders", "get_palette"]
