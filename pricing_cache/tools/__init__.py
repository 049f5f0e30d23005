"""
MCP tools for the pricing cache server.

Importing a tool module registers it with the FastMCP server.
"""

from pricing_cache.tools.get_pricing_rate import get_pricing_rate

__all__ = ["get_pricing_rate"]
