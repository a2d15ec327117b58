# ============================================================================
# ASANA MCP - BACKEND MODULE
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Public API:
#   AsanaClient              Async HTTP client for the Asana REST API
#   AsanaMCPServer           MCP server with the Asana catalog
#   create_asana_server      Factory function
#   create_asana_catalog     Tools + prompts + resources catalog
#   ASANA_TOOLS              Tool definitions list
#   ASANA_PROMPTS            Prompt definitions list
# ============================================================================

from .asana_client import AsanaClient
from .prompts import ASANA_PROMPTS
from .resources import ASANA_RESOURCE_TEMPLATES
from .tools import (
    ASANA_TOOLS,
    AsanaMCPServer,
    create_asana_catalog,
    create_asana_server,
)

__all__ = [
    "AsanaClient",
    "ASANA_TOOLS",
    "ASANA_PROMPTS",
    "ASANA_RESOURCE_TEMPLATES",
    "AsanaMCPServer",
    "create_asana_catalog",
    "create_asana_server",
]
