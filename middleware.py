"""Lets HTML forms reach PUT and DELETE routes.

Browsers only submit GET and POST, so the edit and delete forms post a hidden
``_method`` field. :class:`MethodOverrideMiddleware` reads that field from an
urlencoded POST body (or the query string) and rewrites the request method
before routing. The buffered body is replayed without the ``_method`` field,
so form parsing downstream only sees the submitted data.
"""

import logging
from urllib.parse import parse_qs, parse_qsl, urlencode

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class MethodOverrideMiddleware:
    def __init__(self, app: ASGIApp, field: str = "_method",
                 allowed_methods=("PUT", "PATCH", "DELETE")):
        self.app = app
        self.field = field
        self.allowed_methods = {m.upper() for m in allowed_methods}

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "POST":
            await self.app(scope, receive, send)
            return

        override = self._from_query(scope)
        content_type = Headers(scope=scope).get("content-type", "")
        if override is None and content_type.startswith(FORM_CONTENT_TYPE):
            body = await _read_body(receive)
            override = self._pick(parse_qs(body.decode("latin-1")))
            if override is not None:
                body = self._strip_field(body)
                scope = dict(scope)
                headers = MutableHeaders(scope=scope)
                headers["content-length"] = str(len(body))
            receive = _replay(body, receive)

        if override is not None:
            logger.debug("Overriding POST %s as %s", scope["path"], override)
            scope = dict(scope, method=override)
        await self.app(scope, receive, send)

    def _from_query(self, scope: Scope):
        return self._pick(parse_qs(scope.get("query_string", b"").decode("latin-1")))

    def _strip_field(self, body: bytes) -> bytes:
        pairs = parse_qsl(body.decode("latin-1"), keep_blank_values=True, encoding="latin-1")
        kept = [(k, v) for k, v in pairs if k != self.field]
        return urlencode(kept, encoding="latin-1").encode("latin-1")

    def _pick(self, values):
        candidates = values.get(self.field)
        if not candidates:
            return None
        method = candidates[0].strip().upper()
        return method if method in self.allowed_methods else None


async def _read_body(receive: Receive) -> bytes:
    chunks = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replayed() -> Message:
        nonlocal sent
        if sent:
            return await receive()
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return replayed
