"""
Client Factory - Remote client handles per account

This module builds provider client handles for accounts and keeps them in
an explicit cache owned by whoever composes the synchronizers, currently
supporting AWS Route 53 and an in-memory mock provider.
"""

import logging
import threading
from typing import Callable, Dict, Hashable, Optional

from botocore.config import Config as BotoConfig

from ..core.exceptions import ConfigurationError
from ..core.models import Account
from .base_provider import ZoneProvider
from .credentials import build_session
from .mock_provider import MockRoute53Provider
from .route53_provider import Route53Provider

logger = logging.getLogger(__name__)


class ClientCache:
    """Cache of client handles keyed by account id."""

    def __init__(self):
        self._clients: Dict[Hashable, ZoneProvider] = {}
        self._mutex = threading.Lock()

    def get_or_create(self, key: Hashable, builder: Callable[[], ZoneProvider]) -> ZoneProvider:
        with self._mutex:
            if key not in self._clients:
                self._clients[key] = builder()
            return self._clients[key]

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one cached handle, or all of them when no key is given."""
        with self._mutex:
            if key is None:
                self._clients.clear()
            else:
                self._clients.pop(key, None)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._clients

    def __len__(self) -> int:
        return len(self._clients)


class Route53ClientFactory:
    """Creates and caches remote client handles for accounts."""

    def __init__(
        self,
        config: Optional[Dict] = None,
        cache: Optional[ClientCache] = None,
        builder: Optional[Callable[[Account], ZoneProvider]] = None,
    ):
        """Initialize the factory.

        Args:
            config: The "client" configuration section
            cache: Shared cache, a private one is created when omitted
            builder: Handle builder, defaults to boto3 backed Route 53
        """
        self.config = config or {}
        self.enable_cache = self.config.get("cache", True)
        self.cache = cache if cache is not None else ClientCache()
        self.builder = builder or self._build_route53_provider

    def create_client(self, account: Account) -> ZoneProvider:
        logger.debug(f"Creating Route53 client for account {account.name} ({account.id})")
        return self.builder(account)

    def get_or_create_client(self, account: Account) -> ZoneProvider:
        if not self.enable_cache:
            return self.create_client(account)
        return self.cache.get_or_create(str(account.id), lambda: self.create_client(account))

    def clear_cache(self, account: Optional[Account] = None) -> None:
        if account is None:
            self.cache.invalidate()
            logger.debug("Cleared all Route53 client cache")
            return

        self.cache.invalidate(str(account.id))
        logger.debug(f"Cleared Route53 client cache for account {account.id}")

    def _build_route53_provider(self, account: Account) -> Route53Provider:
        session = build_session(account)
        boto_config = BotoConfig(
            connect_timeout=self.config.get("connect_timeout", 5),
            read_timeout=self.config.get("read_timeout", 30),
            retries={"max_attempts": self.config.get("max_attempts", 3), "mode": "standard"},
        )

        kwargs = {"config": boto_config, "region_name": account.default_region}
        if account.endpoint:
            kwargs["endpoint_url"] = account.endpoint

        return Route53Provider(session.client("route53", **kwargs), account.name)


def create_client_factory(config: Dict, cache: Optional[ClientCache] = None) -> Route53ClientFactory:
    """Get a client factory for the configured provider."""
    provider_name = config.get("provider", "route53")
    client_config = config.get("client", {})

    if provider_name == "route53":
        return Route53ClientFactory(client_config, cache=cache)
    elif provider_name == "mock":
        provider = MockRoute53Provider(config.get("mock", {}))
        return Route53ClientFactory(client_config, cache=cache, builder=lambda account: provider)
    else:
        raise ConfigurationError.invalid_configuration(
            "provider", f"unknown provider '{provider_name}'"
        )
