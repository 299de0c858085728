from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from ip_locator.clients.base import BaseIPLookupClient
from ip_locator.clients.ipwhois_client import IpWhoIsClient
from ip_locator.config import settings
from ip_locator.errors import (
    InvalidIpError,
    IpLookupFailedError,
    IpNotFoundError,
    ReservedIpError,
    UpstreamServiceError,
)
from ip_locator.exception_handlers import unhandled_exception_handler
from ip_locator.logger import logger
from ip_locator.models.common import LookupResult
from ip_locator.models.request_models import IPLookupRequest
from ip_locator.models.response_models import HealthResponse, IPLookupResponse
from ip_locator.render import format_coordinates, render_page, satellite_map_url
from ip_locator.sessions import SessionStore
from ip_locator.state import LookupSession, ViewState

app = FastAPI(
    title="IP Locator",
    version="0.1.0",
    description="Browser-based IP geolocation lookup with an interactive map.",
)
logger.info("Started IP Locator")

session_store = SessionStore(max_sessions=settings.max_sessions)


def get_lookup_client() -> BaseIPLookupClient:
    """Dependency to provide the geolocation provider client."""
    return IpWhoIsClient(base_url=settings.provider_base_url)


def get_session_store() -> SessionStore:
    """Dependency to provide the in-memory store of per-browser view states."""
    return session_store


app.add_exception_handler(Exception, unhandled_exception_handler)


def _resolve_session(request: Request, store: SessionStore) -> tuple[str, LookupSession]:
    return store.get_or_create(request.cookies.get(settings.session_cookie_name))


def _page_response(state: ViewState, session_id: str) -> HTMLResponse:
    response = HTMLResponse(content=render_page(state))
    response.set_cookie(settings.session_cookie_name, session_id, httponly=True, samesite="lax")
    return response


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get("/", response_class=HTMLResponse, tags=["ui"], summary="Locator page, resolving the caller's address.")
async def index(
    request: Request,
    client: Annotated[BaseIPLookupClient, Depends(get_lookup_client)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> HTMLResponse:
    """Page load: look up the caller's own address and render the result."""
    session_id, session = _resolve_session(request, store)
    logger.info(
        "Performing client IP lookup "
        f"path={request.url.path} method={request.method} "
        f"client_ip={request.client.host if request.client else None} "
        f"x_forwarded_for={request.headers.get('x-forwarded-for')}"
    )
    # The provider resolves whichever address the request reaches it from.
    state = await session.mount(client)
    return _page_response(state, session_id)


@app.get("/lookup", response_class=HTMLResponse, tags=["ui"], summary="Submit an address from the search form.")
async def submit_lookup(
    request: Request,
    query: Annotated[IPLookupRequest, Depends()],
    client: Annotated[BaseIPLookupClient, Depends(get_lookup_client)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> HTMLResponse:
    """Form submission: store the typed text and look it up as-is."""
    session_id, session = _resolve_session(request, store)
    logger.info(f"Performing explicit IP lookup path={request.url.path} method={request.method} ip={query.ip!r}")
    session.set_input(query.ip)
    state = await session.submit(client)
    return _page_response(state, session_id)


@app.get("/view", response_class=HTMLResponse, tags=["ui"], summary="Render the current view state.")
async def view(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> HTMLResponse:
    """Re-render whatever the session currently holds, without a new lookup."""
    session_id, session = _resolve_session(request, store)
    return _page_response(session.state, session_id)


@app.get(
    "/v1/ip/lookup",
    response_model=IPLookupResponse,
    status_code=status.HTTP_200_OK,
    tags=["ip"],
    summary="Look up geolocation information for an IP address.",
)
async def ip_lookup(
    request: Request,
    query: Annotated[IPLookupRequest, Depends()],
    client: Annotated[BaseIPLookupClient, Depends(get_lookup_client)],
) -> IPLookupResponse:
    """Look up geolocation information for either a specific address or the caller's.

    - If `query.ip` is provided, it is forwarded to the provider unchanged.
    - Otherwise the provider resolves the address the request reaches it from.
    """
    ip = query.ip

    try:
        logger.info(f"Performing API IP lookup path={request.url.path} method={request.method} ip={ip!r}")
        data: LookupResult = await client.lookup(ip)
    except InvalidIpError as exc:
        logger.error(
            f"Invalid IP error during lookup path={request.url.path} method={request.method} ip={ip!r} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_ip", "message": str(exc)},
        ) from exc
    except ReservedIpError as exc:
        logger.error(
            "Reserved/private IP used for lookup "
            f"path={request.url.path} method={request.method} ip={ip!r} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "reserved_ip", "message": str(exc)},
        ) from exc
    except IpNotFoundError as exc:
        logger.error(
            "No geolocation information found for IP "
            f"path={request.url.path} method={request.method} ip={ip!r} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "ip_not_found", "message": str(exc)},
        ) from exc
    except IpLookupFailedError as exc:
        logger.error(
            "Lookup rejected by provider "
            f"path={request.url.path} method={request.method} ip={ip!r} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "lookup_failed", "message": str(exc)},
        ) from exc
    except UpstreamServiceError as exc:
        logger.exception(
            "Upstream IP provider error during lookup "
            f"path={request.url.path} method={request.method} ip={ip!r} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "upstream_error", "message": str(exc)},
        ) from exc

    return IPLookupResponse(
        **data.model_dump(),
        coordinates=format_coordinates(data.latitude, data.longitude),
        satellite_url=satellite_map_url(data.latitude, data.longitude, settings.satellite_map_base_url),
    )
