from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class IPLookupResponse(BaseModel):
    """Response model for the JSON lookup endpoint."""

    ip: str
    city: str
    region_code: str
    country: str
    flag_img: str
    timezone_id: str
    current_time: str
    isp: str
    latitude: float
    longitude: float
    coordinates: str
    satellite_url: str
