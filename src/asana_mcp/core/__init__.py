# ============================================================================
# ASANA MCP - CORE MODULE
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Request-dispatch and streaming-response core:
#   - Credential resolution (header → default → AuthenticationRequired)
#   - Error taxonomy
#   - Capability catalog registry
#   - Method router (closed method set)
#   - Stream framer (SSE data / error / complete frames)
#   - Transport layer (STDIO + HTTP façade) and the base MCP server
#
# ARCHITECTURE:
# AsanaMCPServer (backend) fills the catalog and supplies the AsanaClient
# factory. Nothing in core knows about Asana's API.
# ============================================================================

from .auth import (
    TOKEN_HEADER,
    TOKEN_ENV_VAR,
    resolve_access_token,
    extract_token_from_request,
    default_token_from_env,
)
from .catalog import CapabilityCatalog
from .errors import (
    GatewayError,
    AuthenticationRequired,
    UnsupportedMethod,
    MissingParameter,
    NotFound,
    DelegateFailure,
)
from .framing import (
    StreamFramer,
    FrameSequenceError,
    next_request_id,
    stream_operation,
)
from .router import (
    McpMethod,
    McpRequest,
    MethodRouter,
    serialize_result,
)
from .server import (
    BaseMCPServer,
    create_mcp_server,
)
from .transport import (
    run_stdio,
    run_http,
    create_http_app,
)

__all__ = [
    "TOKEN_HEADER",
    "TOKEN_ENV_VAR",
    "resolve_access_token",
    "extract_token_from_request",
    "default_token_from_env",
    "CapabilityCatalog",
    "GatewayError",
    "AuthenticationRequired",
    "UnsupportedMethod",
    "MissingParameter",
    "NotFound",
    "DelegateFailure",
    "StreamFramer",
    "FrameSequenceError",
    "next_request_id",
    "stream_operation",
    "McpMethod",
    "McpRequest",
    "MethodRouter",
    "serialize_result",
    "BaseMCPServer",
    "create_mcp_server",
    "run_stdio",
    "run_http",
    "create_http_app",
]
