from fastapi import Request, status
from fastapi.responses import HTMLResponse, JSONResponse, Response

from ip_locator.logger import logger
from ip_locator.render import render_page
from ip_locator.state import ViewState

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing the request."

# Routes answered with the locator page rather than JSON.
PAGE_PATHS = frozenset({"/", "/lookup", "/view"})


def _get_address_from_request(request: Request) -> str | None:
    """Best-effort extraction of the looked-up address from the incoming request.

    Lookup routes take the address as the `ip` query parameter; for other
    routes this will typically be None.
    """
    return request.query_params.get("ip")


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Catch-all handler for unexpected errors.

    Browser routes get the page with the error shown in place of a result,
    everything else a structured JSON body. Both answer with HTTP 500.
    """
    address = _get_address_from_request(request)
    logger.exception(
        f"Unhandled exception {repr(exc)} path={request.url.path} method={request.method} ip={address!r}"
    )

    if request.url.path in PAGE_PATHS:
        state = ViewState(input_text=address or "", error_message=UNEXPECTED_ERROR_MESSAGE)
        return HTMLResponse(content=render_page(state), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"code": "internal_error", "message": UNEXPECTED_ERROR_MESSAGE},
    )
