"""An HTTP method and path router built on the pattern matcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, MutableMapping, Protocol

from .matcher import Matcher
from .matching_context import MatchingContext, parse_url_path
from .pattern import PatternError, parse_pattern

_logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404
HTTP_INTERNAL_SERVER_ERROR = 500


class ResponseWriter(Protocol):
    """Where a response is written: headers, a status code and a body."""

    headers: MutableMapping[str, list[str]]

    def write_header(self, code: int) -> None: ...

    def write(self, data: bytes) -> int: ...


class HttpResponse(Protocol):
    """A response that knows how to write itself."""

    def write(self, writer: ResponseWriter, mc: MatchingContext) -> None: ...


Handler = Callable[[MatchingContext], HttpResponse]
ErrLogFunc = Callable[[BaseException], None]


def _default_err_log(err: BaseException) -> None:
    _logger.error("%s", err)


@dataclass
class Request:
    """An incoming request: its method, its decoded URL path and extras."""

    method: str
    path: str = "/"
    headers: dict[str, list[str]] = field(default_factory=dict)
    context: Any = None


class Router:
    """Dispatches requests to handlers registered per HTTP method and path."""

    def __init__(
        self,
        case_insensitive_path_match: bool = False,
        err_log_func: ErrLogFunc | None = None,
    ) -> None:
        self.case_insensitive_path_match = case_insensitive_path_match
        self.err_log_func: ErrLogFunc = err_log_func or _default_err_log
        self.endpoint_matchers: dict[str, Matcher] = {}

    def handle(self, http_method: str, path_pattern: str, handler: Handler) -> Router:
        """Register a handler; raise PatternError if it cannot be registered.

        Returns the router so that registrations can be chained.
        """
        try:
            pattern = parse_pattern(path_pattern, self.case_insensitive_path_match)
        except PatternError as err:
            raise PatternError(
                f"failed to parse match pattern: {http_method}:{path_pattern}, err: {err}"
            ) from err
        pattern.attachment = handler
        method = http_method.upper()
        matcher = self.endpoint_matchers.get(method)
        if matcher is None:
            matcher = Matcher(self.case_insensitive_path_match)
            self.endpoint_matchers[method] = matcher
        try:
            matcher.add_pattern(pattern)
        except PatternError as err:
            raise PatternError(
                f"failed to register match pattern: {method}:{path_pattern}, err: {err}"
            ) from err
        return self

    def serve(self, request: Request, writer: ResponseWriter) -> None:
        """Route one request and write its response to ``writer``."""
        mc = MatchingContext(
            path=request.path,
            path_segments=parse_url_path(request.path),
            request=request,
        )
        matcher = self.endpoint_matchers.get(request.method.upper())
        if matcher is None:
            writer.write_header(HTTP_NOT_FOUND)
            return
        pattern = matcher.match(request.path, mc)
        if pattern is None:
            writer.write_header(HTTP_NOT_FOUND)
            return
        handler: Handler = pattern.attachment

        try:
            response = handler(mc)
        except Exception as err:
            wrapped = RuntimeError(f"uncaught error in request handler, err: {err}")
            wrapped.__cause__ = err
            self.err_log_func(wrapped)
            writer.write_header(HTTP_INTERNAL_SERVER_ERROR)
            return

        try:
            response.write(writer, mc)
        except Exception as err:
            self.err_log_func(err)


def default_router() -> Router:
    """Return a case-sensitive router that logs errors to the module logger."""
    return Router(False, _default_err_log)