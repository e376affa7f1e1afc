"""
Services module - business logic layer.

Contains all services and the ServiceFactory for dependency injection.
"""

from tokenfeed.services.factory import ServiceFactory
from tokenfeed.services.market_data.aggregator import MarketDataAggregator

__all__ = ["ServiceFactory", "MarketDataAggregator"]
