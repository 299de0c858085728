"""HTML rendering of the locator page.

Rendering is a pure function of the `ViewState` (plus static map settings):
the same state always produces the same markup.
"""

import re
from pathlib import Path
from typing import Literal

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ip_locator.config import Settings, settings
from ip_locator.state import ViewState

TEMPLATES_DIR = Path(__file__).parent / "templates"

ContentKind = Literal["error", "loading", "result", "idle"]

_environment = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def content_kind(state: ViewState) -> ContentKind:
    """Decide what the content body shows for `state`.

    An error message wins over everything else, including a result left over
    from an earlier lookup.
    """
    if state.error_message:
        return "error"
    if state.is_loading and state.result is None:
        return "loading"
    if state.result is not None and not state.is_loading:
        return "result"
    return "idle"


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.4f}, {longitude:.4f}"


def satellite_map_url(latitude: float, longitude: float, base_url: str = "https://www.google.com/maps") -> str:
    return f"{base_url}?q={latitude},{longitude}"


def map_key(ip: str) -> str:
    """DOM id of the map panel, derived from the resolved address.

    A different address yields a different id, so the browser builds a new map
    instead of reusing the previous center and zoom.
    """
    return "map-" + re.sub(r"[^A-Za-z0-9]+", "-", ip).strip("-")


def render_page(state: ViewState, config: Settings | None = None) -> str:
    config = config or settings
    result = state.result
    context = {
        "state": state,
        "kind": content_kind(state),
        "map_zoom": config.map_zoom,
        "tile_url": config.tile_url_template,
        "tile_attribution": config.tile_attribution,
    }
    if result is not None:
        context.update(
            coordinates=format_coordinates(result.latitude, result.longitude),
            satellite_url=satellite_map_url(result.latitude, result.longitude, config.satellite_map_base_url),
            map_id=map_key(result.ip),
        )
    return _environment.get_template("index.html").render(**context)
