"""Error recording and conversion of failures into Responses."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

from markupsafe import Markup

from action_dispatch.core.directives import ControllerEntry
from action_dispatch.core.exceptions import GENERIC_ERROR_MESSAGE, DispatchError
from action_dispatch.core.logging import get_logger
from action_dispatch.core.models import RequestContext, Response
from action_dispatch.core.ports import ErrorRecorderPort, RendererPort

CLI_ERROR_PREFIX = "Request could not be completed."

logger = get_logger(__name__)


class ErrorRecorder(ErrorRecorderPort):
    """Write failures to the structured log with their traceback."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._logger = log or logger

    def record(self, error: BaseException | str) -> None:
        if isinstance(error, str):
            self._logger.error(error)
            return
        self._logger.error(
            "%s: %s",
            type(error).__name__,
            error,
            exc_info=(type(error), error, error.__traceback__),
            extra={
                "error_type": type(error).__name__,
                "error_code": getattr(error, "error_code", "server_error"),
            },
        )


class ErrorResponder:
    """Turn exceptions into origin-appropriate error Responses.

    ``respond`` records the failure before building the Response; ``build``
    only builds it. Callers pick one so that each failure is logged once.
    """

    def __init__(self, recorder: ErrorRecorderPort, renderer: RendererPort) -> None:
        self._recorder = recorder
        self._renderer = renderer

    def record(self, error: BaseException | str) -> None:
        self._recorder.record(error)

    def respond(
        self,
        error: BaseException,
        context: RequestContext,
        entry: Optional[ControllerEntry] = None,
    ) -> Response:
        self._recorder.record(error)
        return self.build(error, context, entry)

    def build(
        self,
        error: BaseException,
        context: RequestContext,
        entry: Optional[ControllerEntry] = None,
    ) -> Response:
        if isinstance(error, DispatchError):
            public = error.public_message()
            code = error.error_code
            status = error.status
        else:
            public = GENERIC_ERROR_MESSAGE
            code = "server_error"
            status = HTTPStatus.INTERNAL_SERVER_ERROR

        data = {"error_code": code, "message": public}
        if context.is_from_cli:
            detail = str(error) or type(error).__name__
            return Response(False, message=f"{CLI_ERROR_PREFIX} {detail}", data=data, status=status)
        if context.is_async:
            return Response(False, message=public, data=data, status=status)
        return Response(
            False,
            message=public,
            data=data,
            content=self._error_body(public, entry),
            status=status,
        )

    def _error_body(self, message: str, entry: Optional[ControllerEntry]) -> str:
        heading = entry.error_heading if entry else "Something went wrong"
        if entry and entry.error_template:
            try:
                return self._renderer.render(
                    entry.error_template, {"heading": heading, "message": message}
                )
            except DispatchError as exc:
                logger.warning("Error template %s unusable: %s", entry.error_template, exc)
        return str(Markup("<h1>{}</h1>\n<p>{}</p>").format(heading, message))


__all__ = ["CLI_ERROR_PREFIX", "ErrorRecorder", "ErrorResponder"]
