from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class LookupResult(BaseModel):
    """Normalized geolocation data for one resolved address.

    Immutable once received; a later successful lookup replaces it wholesale.
    Text fields default to an empty string when the provider omits them, the
    coordinates are required because the map cannot be drawn without them.
    """

    model_config = ConfigDict(frozen=True)

    ip: str
    city: str = ""
    region_code: str = ""
    country: str = ""
    flag_img: str = ""
    timezone_id: str = ""
    current_time: str = ""
    isp: str = ""
    latitude: float
    longitude: float

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_lat_lon(cls, value: Any) -> float:
        """Allow latitude/longitude to be provided as strings or numbers."""
        try:
            # For general GPS and mapping, 5-6 decimal places (e.g., 34.052235)
            return round(float(value), 6)
        except (TypeError, ValueError) as exc:
            raise ValueError("coordinates must be numeric") from exc
