"""
Exchange clients.

This package provides the exchange contract consumed by the decision
engine, the signed Bitfinex REST client used in live trading and the
paper exchange used for simulation.
"""

from .base import ExchangeClient, ExchangeError  # noqa: F401
from .bitfinex_rest import BitfinexRestClient  # noqa: F401
from .paper_exchange import PaperExchangeClient  # noqa: F401
