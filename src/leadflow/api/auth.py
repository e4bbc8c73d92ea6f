from __future__ import annotations

import hmac
import logging

from fastapi import Header, Request

from leadflow.errors import AuthRejected

logger = logging.getLogger(__name__)


async def require_auth(
    request: Request,
    authorization: str | None = Header(None),
) -> None:
    """Accept the request if it carries one of the configured bearer tokens."""
    tokens = request.app.state.config.api_tokens
    if not tokens:
        return

    scheme, _, token = (authorization or "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        logger.warning("Rejected %s %s: missing bearer token", request.method, request.url.path)
        raise AuthRejected("Missing or invalid Authorization header")
    if not any(hmac.compare_digest(token, known) for known in tokens):
        logger.warning("Rejected %s %s: unknown token", request.method, request.url.path)
        raise AuthRejected("Invalid token")
