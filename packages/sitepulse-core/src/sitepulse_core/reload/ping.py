"""Server side of live reload: the content token and the ``/ping`` endpoint."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContentVersion:
    """Opaque token identifying the currently served content.

    The token is the UTC timestamp of the last (re)start, so any rebuild
    yields a new value.
    """

    def __init__(self, clock=_utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._generation = 0
        self._last_raw = clock()
        self._token = self._last_raw

    @property
    def token(self) -> str:
        with self._lock:
            return self._token

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def bump(self) -> str:
        """Replace the token with a fresh one and return it."""
        with self._lock:
            raw = self._clock()
            self._generation += 1
            # A repeated clock value must still yield a token never served before.
            token = raw if raw != self._last_raw else f"{raw}#{self._generation}"
            self._last_raw = raw
            self._token = token
            return token


class PingEndpoint:
    """Minimal ASGI app answering ``GET /ping`` with the content token."""

    def __init__(self, version: ContentVersion, path: str = "/ping") -> None:
        self.version = version
        self.path = path

    def check(self, request_path: str | None) -> bool:
        return request_path == self.path

    def handle(self) -> str:
        return self.version.token

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] == "lifespan":
            while True:
                message = await receive()
                if message["type"] == "lifespan.startup":
                    await send({"type": "lifespan.startup.complete"})
                elif message["type"] == "lifespan.shutdown":
                    await send({"type": "lifespan.shutdown.complete"})
                    return
        if scope["type"] != "http":
            return

        if scope.get("method") in ("GET", "HEAD") and self.check(scope.get("path")):
            status, body = 200, self.handle().encode()
        else:
            status, body = 404, b"Not Found"
            logger.debug("No handler for %s %s", scope.get("method"), scope.get("path"))

        await send({
            "type": "http.response.start",
            "status": status,
            "headers": [
                (b"content-type", b"text/plain; charset=utf-8"),
                (b"content-length", str(len(body)).encode()),
                (b"cache-control", b"no-store"),
            ],
        })
        await send({
            "type": "http.response.body",
            "body": b"" if scope.get("method") == "HEAD" else body,
        })
