ADDRESS_NOT_FOUND_MESSAGE = "Address not found."


class AppError(Exception):
    """Base application error for the IP locator."""


class IpProviderError(AppError):
    """Base error for IP geolocation provider failures."""


class IpLookupFailedError(IpProviderError):
    """Raised when the provider was reached but reported an unsuccessful lookup.

    The provider's own message is kept verbatim; when it sent none the error
    falls back to a generic "address not found" text.
    """

    def __init__(self, provider_message: str | None = None) -> None:
        self.provider_message = provider_message
        super().__init__(provider_message or ADDRESS_NOT_FOUND_MESSAGE)


class InvalidIpError(IpLookupFailedError):
    """Raised when the provider rejects the address as malformed."""


class ReservedIpError(IpLookupFailedError):
    """Raised when the address is reserved/private (e.g. 127.0.0.1, 192.168.x.x)."""


class IpNotFoundError(IpLookupFailedError):
    """Raised when no geolocation information is found for the address."""


class UpstreamServiceError(IpProviderError):
    """Raised when the provider cannot be reached or its response is unusable."""
