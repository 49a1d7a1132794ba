"""Single entry route that hands every web request to the dispatcher."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from action_dispatch.core.config import config
from action_dispatch.core.logging import get_logger
from action_dispatch.core.models import ShapedResponse
from action_dispatch.services import ServiceContainer
from action_dispatch.services.dispatcher import Dispatcher
from action_dispatch.services.identity import IdentityProvider
from action_dispatch.services.request_context import context_from_web
from action_dispatch.services.shaping import HTML_MEDIA_TYPE, JSON_MEDIA_TYPE

from ..dependencies import get_service_container

router = APIRouter()
logger = get_logger(__name__)


def to_http_response(shaped: ShapedResponse) -> Response:
    """Emit a shaped payload with the matching FastAPI response class."""
    if shaped.media_type == JSON_MEDIA_TYPE:
        return JSONResponse(shaped.body, status_code=shaped.status_code)
    if shaped.media_type == HTML_MEDIA_TYPE:
        return HTMLResponse(shaped.body, status_code=shaped.status_code)
    return PlainTextResponse(str(shaped.body), status_code=shaped.status_code)


async def _read_form(request: Request) -> dict[str, str]:
    if request.method != "POST":
        return {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


@router.api_route("/", methods=["GET", "POST"])
async def dispatch_request(
    request: Request,
    services: Annotated[ServiceContainer, Depends(get_service_container)],
) -> Response:
    """Dispatch ``?ctrl=<label>&action=<name>`` and emit the shaped result."""
    form = await _read_form(request)
    context = context_from_web(dict(request.query_params), form, services.directives)

    cookie_name = config.SESSION_COOKIE_NAME
    presented = request.cookies.get(cookie_name)
    identity = await run_in_threadpool(IdentityProvider, services.identity_store, presented)
    dispatcher = Dispatcher(services, identity=identity)
    shaped = await run_in_threadpool(dispatcher.dispatch, context, config.SERVE_CLIENT_APP)
    request.state.dispatch = {
        "origin": context.origin.value,
        "controller": dispatcher.controller_name(),
        "action": dispatcher.action_name(),
    }
    if not isinstance(shaped, ShapedResponse):
        # Actions cannot end a web request's session; the invoker rejects it.
        logger.error("Dispatcher returned %r for a web request", shaped)
        return PlainTextResponse("Internal Server Error", status_code=500)

    response = to_http_response(shaped)
    if identity.session_token != presented:
        if identity.session_token:
            response.set_cookie(cookie_name, identity.session_token, httponly=True, samesite="lax")
        else:
            response.delete_cookie(cookie_name)
    return response


__all__ = ["router", "to_http_response"]
