# ============================================================================
# ASANA MCP - CREDENTIAL RESOLUTION
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Resolves the Asana Personal Access Token for a single request.
#
# PRECEDENCE:
#   1. x-asana-token request header (non-empty)
#   2. Process default (ASANA_ACCESS_TOKEN, read once at startup)
#   3. Neither → AuthenticationRequired
#
# Tokens are never cached and never logged.
# ============================================================================

import os
from collections.abc import Mapping

from starlette.requests import Request

from .errors import AuthenticationRequired

__all__ = [
    "TOKEN_HEADER",
    "TOKEN_ENV_VAR",
    "resolve_access_token",
    "extract_token_from_request",
    "default_token_from_env",
]

TOKEN_HEADER = "x-asana-token"
TOKEN_ENV_VAR = "ASANA_ACCESS_TOKEN"


def default_token_from_env(environ: Mapping[str, str] | None = None) -> str | None:
    """Read the process-wide default token. Empty values count as unset."""
    env = os.environ if environ is None else environ
    token = env.get(TOKEN_ENV_VAR, "").strip()
    return token or None


def resolve_access_token(
    headers: Mapping[str, str] | None = None,
    default_token: str | None = None,
) -> str:
    """Return the credential for one request.

    A header-supplied token always wins over the default; an empty header
    falls through to the default.
    """
    header_token = headers.get(TOKEN_HEADER) if headers is not None else None
    if header_token:
        return header_token
    if default_token:
        return default_token
    raise AuthenticationRequired()


def extract_token_from_request(request: Request, default_token: str | None = None) -> str:
    if request is None:
        return resolve_access_token(None, default_token)
    return resolve_access_token(request.headers, default_token)
