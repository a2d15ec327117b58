# ============================================================================
# ASANA MCP: Asana Project Management Server
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Exposes the Asana API as MCP tools, prompts and resources:
#   - 14 tools (workspaces, projects, tasks, stories)
#   - 3 prompts (task-summary, task-completeness, create-task)
#   - workspace and project resources
#
# Usage:
#   export ASANA_ACCESS_TOKEN=your_personal_access_token
#   asana-mcp                      # stdio
#   TRANSPORT=http asana-mcp       # HTTP/SSE façade on $PORT (default 3000)
#
# Environment Variables:
#   ASANA_ACCESS_TOKEN - Asana Personal Access Token (required for STDIO mode,
#                        optional default for HTTP mode)
#   TRANSPORT          - Transport: stdio (default) or http
#   HOST / PORT        - HTTP bind address (default 0.0.0.0:3000)
#   LOG_LEVEL          - Logging level (default INFO)
# ============================================================================

import logging
import os
import sys

# Version from package metadata
from importlib.metadata import version as _get_version
__version__ = _get_version("asana-mcp")

# Public API
__all__ = [
    "__version__",
    "main",
]


def _configure_logging() -> None:
    # stdout carries the stdio protocol; logs always go to stderr
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _validate_access_token(access_token: str | None, transport: str) -> str | None:
    """Validate the access token for the given transport.
    HTTP mode: token is optional (per-request header, env as fallback).
    STDIO mode: token required at startup.
    """
    if transport == "http":
        return access_token

    if not access_token:
        print("ERROR: ASANA_ACCESS_TOKEN environment variable not set", file=sys.stderr)
        print("", file=sys.stderr)
        print("Create a Personal Access Token at: https://app.asana.com/0/my-apps", file=sys.stderr)
        print("", file=sys.stderr)
        print("Then set it:", file=sys.stderr)
        print("  export ASANA_ACCESS_TOKEN=your_token_here", file=sys.stderr)
        sys.exit(1)

    return access_token


def main() -> None:
    """Main entry point: runs the Asana MCP server."""
    from .core.auth import default_token_from_env

    _configure_logging()

    access_token = default_token_from_env()
    transport = os.environ.get("TRANSPORT", "stdio").lower()
    http_mode = transport == "http"

    validated_token = _validate_access_token(access_token, transport)

    print(f"[asana-mcp] Starting server v{__version__} ({transport})...", file=sys.stderr)

    try:
        from .backend import create_asana_server
        server = create_asana_server(access_token=validated_token, http_mode=http_mode)
        server.run(transport=transport)
    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
