"""
Router setup and configuration.

Registers all handlers and middleware with the dispatcher.
"""

from aiogram import Dispatcher

from tokenfeed.handlers import common_handler, feed_handler, quote_handler
from tokenfeed.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from tokenfeed.services.factory import ServiceFactory
from tokenfeed.services.market_data.aggregator import MarketDataAggregator


def setup_routers(
    dp: Dispatcher,
    aggregator: MarketDataAggregator,
    factory: ServiceFactory,
) -> None:
    """
    Configure dispatcher with all routers and middleware.

    Sets up:
    1. Global middleware (error handling, logging)
    2. Command handlers (/start, /help)
    3. Feed handlers (/network, /trending, /feed)
    4. Quote handler (/quote)

    Args:
        dp: Aiogram dispatcher
        aggregator: Market data service for injection into handlers
        factory: Service factory (quote pipelines are created per request)
    """
    # Register middleware (order: first registered = outermost)
    # Logging should be outermost to capture all requests including errors
    # Error handler is inner to catch and transform exceptions
    dp.update.middleware(LoggingMiddleware())
    dp.update.middleware(ErrorHandlerMiddleware())

    # Store services for dependency injection
    # This makes them available as handler arguments
    dp["aggregator"] = aggregator
    dp["factory"] = factory
    dp["chat_networks"] = {}

    dp.include_router(common_handler.router)
    dp.include_router(feed_handler.router)
    dp.include_router(quote_handler.router)
