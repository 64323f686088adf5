"""
HTTP surface for the price archive service.
"""

from src.api.app import PRICES_ROUTE, create_app

__all__ = ["PRICES_ROUTE", "create_app"]
