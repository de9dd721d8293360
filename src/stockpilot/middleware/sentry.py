"""Sentry context middleware to capture request context in error reports."""

import sentry_sdk
from starlette.types import ASGIApp, Receive, Scope, Send

from stockpilot.core.logging import get_request_id


class SentryContextMiddleware:
    """
    Attach request_id and the session's user_id to Sentry events.

    Must be added before RequestIDMiddleware and SessionMiddleware so that it runs
    after both of them.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = get_request_id()
        sentry_sdk.set_tag("request_id", request_id)

        session = scope.get("session") or {}
        user_id = session.get("user_id")
        if user_id:
            sentry_sdk.set_user({"id": user_id})

        sentry_sdk.set_context(
            "request",
            {
                "method": scope.get("method"),
                "path": scope.get("path"),
                "request_id": request_id,
            },
        )

        await self.app(scope, receive, send)
