"""
Remote DNS provider implementations.

This package contains the client handle interface, the AWS Route 53 and
mock providers, credential resolution and the per-account client cache.
"""

from .base_provider import ZoneProvider
from .client_factory import ClientCache, Route53ClientFactory, create_client_factory
from .mock_provider import MockRoute53Provider
from .route53_provider import Route53Provider

__all__ = [
    "ZoneProvider",
    "ClientCache",
    "Route53ClientFactory",
    "create_client_factory",
    "MockRoute53Provider",
    "Route53Provider",
]
