# ============================================================================
# ASANA MCP - ERROR TAXONOMY
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Every failure the gateway reports to a caller is one of these.
# Each carries the HTTP status the façade answers with:
#
#   AuthenticationRequired  401  no credential resolvable
#   UnsupportedMethod       404  method outside the known set
#   NotFound                404  tool / prompt / resource absent
#   MissingParameter        500  required field absent
#   DelegateFailure         500  the Asana API call itself failed
# ============================================================================

__all__ = [
    "GatewayError",
    "AuthenticationRequired",
    "UnsupportedMethod",
    "MissingParameter",
    "NotFound",
    "DelegateFailure",
]


class GatewayError(Exception):
    """Base class for errors surfaced at the transport boundary."""

    status_code: int = 500
    default_message: str = "Unknown error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AuthenticationRequired(GatewayError):
    status_code = 401
    default_message = "Asana access token required"


class UnsupportedMethod(GatewayError):
    status_code = 404
    default_message = "Unsupported MCP method"


class MissingParameter(GatewayError):
    status_code = 500
    default_message = "Required parameter missing"


class NotFound(GatewayError):
    status_code = 404
    default_message = "Not found"


class DelegateFailure(GatewayError):
    """The wrapped Asana API call failed (network, remote 4xx/5xx, bad payload).

    ``remote_status`` holds the Asana HTTP status when there was one.
    """

    status_code = 500
    default_message = "Asana API request failed"

    def __init__(self, message: str | None = None, remote_status: int | None = None) -> None:
        super().__init__(message)
        self.remote_status = remote_status
