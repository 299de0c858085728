"""View state of the locator page and the lookup flow that drives it.

`ViewState` is immutable; every change goes through one of the transition
functions below and is installed by the owning `LookupSession`.
"""

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict

from ip_locator.clients.base import BaseIPLookupClient
from ip_locator.errors import IpLookupFailedError, UpstreamServiceError
from ip_locator.logger import logger
from ip_locator.models.common import LookupResult

SERVICE_UNREACHABLE_MESSAGE = "Could not reach the geolocation service."


class ViewState(BaseModel):
    """Everything the page currently shows for one browser session."""

    model_config = ConfigDict(frozen=True)

    input_text: str = ""
    result: LookupResult | None = None
    is_loading: bool = False
    error_message: str | None = None


def with_input(state: ViewState, text: str) -> ViewState:
    return state.model_copy(update={"input_text": text})


def start_lookup(state: ViewState) -> ViewState:
    # The previous result stays in place until the lookup completes.
    return state.model_copy(update={"is_loading": True, "error_message": None})


def lookup_succeeded(state: ViewState, result: LookupResult) -> ViewState:
    return state.model_copy(update={"result": result, "error_message": None, "is_loading": False})


def lookup_failed(state: ViewState, message: str) -> ViewState:
    return state.model_copy(update={"result": None, "error_message": message, "is_loading": False})


def finish_lookup(state: ViewState) -> ViewState:
    return state.model_copy(update={"is_loading": False})


def domain_failure_message(exc: IpLookupFailedError) -> str:
    return f"Error: {exc}"


class LookupSession:
    """Owns the `ViewState` of one browser session.

    Lookups are sequenced with a generation counter: each lookup captures the
    counter when it is dispatched and applies its outcome only if no newer
    lookup was dispatched in the meantime. The newest lookup always wins,
    regardless of the order in which the provider answers.
    """

    def __init__(self) -> None:
        self._state = ViewState()
        self._generation = 0

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def set_input(self, text: str) -> ViewState:
        self._state = with_input(self._state, text)
        return self._state

    async def mount(self, client: BaseIPLookupClient) -> ViewState:
        """Initial page load: resolve the caller's own address."""
        return await self._run("", client.lookup_client_ip)

    async def submit(self, client: BaseIPLookupClient) -> ViewState:
        """Look up whatever is currently typed in the input."""
        return await self.lookup(client, self._state.input_text)

    async def lookup(self, client: BaseIPLookupClient, address: str) -> ViewState:
        """Run one lookup of `address` and fold its outcome into the view state."""
        return await self._run(address, lambda: client.lookup(address))

    async def _run(self, address: str, fetch: Callable[[], Awaitable[LookupResult]]) -> ViewState:
        """Domain and transport failures become display strings.

        Anything else, cancellation included, still ends the loading state
        before it propagates.
        """
        self._generation += 1
        generation = self._generation
        self._state = start_lookup(self._state)
        settled = False

        try:
            result = await fetch()
        except IpLookupFailedError as exc:
            logger.info(f"Lookup rejected by provider ip={address!r} generation={generation} error={exc}")
            self._apply(generation, lambda state: lookup_failed(state, domain_failure_message(exc)))
            settled = True
        except UpstreamServiceError as exc:
            logger.error(f"Lookup failed to reach provider ip={address!r} generation={generation} error={exc}")
            self._apply(generation, lambda state: lookup_failed(state, SERVICE_UNREACHABLE_MESSAGE))
            settled = True
        else:
            self._apply(generation, lambda state: lookup_succeeded(state, result))
            settled = True
        finally:
            if not settled:
                self._apply(generation, finish_lookup)

        return self._state

    def _apply(self, generation: int, transition: Callable[[ViewState], ViewState]) -> None:
        if generation != self._generation:
            logger.info(
                f"Discarding superseded lookup outcome generation={generation} current={self._generation}"
            )
            return
        self._state = transition(self._state)
