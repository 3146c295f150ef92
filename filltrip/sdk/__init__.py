"""
Clients for the services FillTrip talks to.

Provides programmatic access to trip/log persistence and route lookup.
"""

from .persistence_client import PersistenceClient, PersistenceError
from .routing_client import RouteInfo, RoutingClient, RoutingError

__all__ = ["PersistenceClient", "PersistenceError", "RouteInfo", "RoutingClient", "RoutingError"]
