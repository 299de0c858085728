from pydantic import BaseModel, Field


class IPLookupRequest(BaseModel):
    """Request model for IP geolocation lookup via query parameters.

    The address is forwarded to the provider as-is. An empty value asks the
    provider to resolve the caller's own address.
    """

    ip: str = Field(
        default="",
        description="Address to look up. If empty, the provider resolves the caller's address.",
        examples=["8.8.8.8", "2001:4860:4860::8888"],
    )
