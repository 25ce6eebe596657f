"""Prometheus middleware."""

import time

from starlette.routing import Match
from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.metrics.asgi_metrics import EXCEPTIONS, REQUESTS, REQUESTS_IN_PROGRESS, REQUESTS_PROCESSING_TIME, RESPONSES


class PrometheusMiddleware:
    """Middleware that counts and times HTTP requests per route template."""

    def __init__(self, app: ASGIApp, *, filter_unhandled_paths: bool = False) -> None:
        """Initialize the Prometheus middleware.

        Args:
            app: The ASGI app to wrap.
            filter_unhandled_paths: Skip requests to paths no route matches.
        """
        self.app = app
        self.filter_unhandled_paths = filter_unhandled_paths

    @staticmethod
    def get_path_template(scope: Scope) -> tuple[str, bool]:
        """Get the route path template and whether any route handles it.

        Partial matches (right path, wrong method) count as handled so that
        405 responses of the webhook are recorded.

        Args:
            scope: The ASGI scope.

        Returns:
            Tuple[str, bool]: The path template and whether it's handled.
        """
        partial = None
        for route in scope["app"].routes:
            match, _ = route.matches(scope)
            if match == Match.FULL:
                return route.path, True
            if match == Match.PARTIAL and partial is None:
                partial = route.path
        if partial is not None:
            return partial, True
        return scope["path"], False

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process the request and collect metrics.

        Args:
            scope: The ASGI scope.
            receive: The ASGI receive function.
            send: The ASGI send function.

        Raises:
            BaseException: Any exception raised by the wrapped app.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        path_template, is_handled_path = self.get_path_template(scope)
        if self.filter_unhandled_paths and not is_handled_path:
            await self.app(scope, receive, send)
            return

        status_code = HTTP_200_OK
        REQUESTS_IN_PROGRESS.labels(method=method, path_template=path_template).inc()
        REQUESTS.labels(method=method, path_template=path_template).inc()
        before_time = time.perf_counter()

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except BaseException as exp:
            status_code = HTTP_500_INTERNAL_SERVER_ERROR
            EXCEPTIONS.labels(
                method=method,
                path_template=path_template,
                exception_type=type(exp).__name__,
            ).inc()
            raise
        else:
            duration = time.perf_counter() - before_time
            REQUESTS_PROCESSING_TIME.labels(method=method, path_template=path_template).observe(duration)
        finally:
            RESPONSES.labels(method=method, path_template=path_template, status_code=status_code).inc()
            REQUESTS_IN_PROGRESS.labels(method=method, path_template=path_template).dec()
