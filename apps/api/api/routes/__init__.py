"""Route modules exposed by the API package."""

from . import metrics, ping, reports, tickets

__all__ = ["metrics", "ping", "reports", "tickets"]
