from abc import ABC, abstractmethod

from ip_locator.models.common import LookupResult


class BaseIPLookupClient(ABC):
    """Abstract base for IP geolocation clients.

    Implementations map the provider's response into a `LookupResult` or raise
    one of the `IpProviderError` subclasses.
    """

    @abstractmethod
    async def lookup(self, address: str) -> LookupResult:
        """Look up geolocation information for `address`.

        An empty address resolves the caller's own address.
        """
        raise NotImplementedError

    async def lookup_client_ip(self) -> LookupResult:
        """Look up geolocation information for the calling client's IP address."""
        return await self.lookup("")
