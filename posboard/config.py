"""Application configuration objects."""

import os
import sys
from typing import List
from dotenv import load_dotenv

if getattr(sys, "frozen", False):
    load_dotenv(os.path.join(sys._MEIPASS, ".env"))
else:
    load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Base configuration for the posboard service."""

    # -------------------------
    # Remote POS API
    # -------------------------
    API_BASE_URL = os.getenv("POSBOARD_API_BASE_URL", "http://localhost:8000/api").rstrip("/")
    API_TOKEN = os.getenv("POSBOARD_API_TOKEN")
    API_TIMEOUT_S = float(os.getenv("POSBOARD_API_TIMEOUT_S", "15"))

    # -------------------------
    # Logging
    # -------------------------
    LOG_LEVEL = os.getenv("POSBOARD_LOG_LEVEL", "INFO").upper()

    # -------------------------
    # Filters
    # -------------------------
    DEFAULT_LIMIT = int(os.getenv("POSBOARD_DEFAULT_LIMIT", "5"))
    REJECT_FUTURE_END_DATE = _env_bool("POSBOARD_REJECT_FUTURE_END_DATE", True)

    # -------------------------
    # Charts
    # -------------------------
    # Dataset colours cycle through this list; its length is the palette size.
    PALETTE: List[str] = [
        "rgba(75, 192, 192, 0.8)",
        "rgba(54, 162, 235, 0.6)",
        "rgba(255, 99, 132, 0.6)",
        "rgba(255, 206, 86, 0.6)",
        "rgba(153, 102, 255, 0.6)",
        "rgba(255, 159, 64, 0.6)",
    ]

    # -------------------------
    # Live orders
    # -------------------------
    LIVE_ORDERS_ENABLED = _env_bool("POSBOARD_LIVE_ORDERS_ENABLED", False)
    POLL_INTERVAL_S = float(os.getenv("POSBOARD_POLL_INTERVAL_S", "0.5"))
    DEBOUNCE_S = float(os.getenv("POSBOARD_DEBOUNCE_S", "0.5"))
    ORDERS_PAGE_SIZE = int(os.getenv("POSBOARD_ORDERS_PAGE_SIZE", "20"))


__all__ = ["Config"]
