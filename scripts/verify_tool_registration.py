#!/usr/bin/env python3
"""
Verify that the pricing tools are properly registered with FastMCP.

This script imports the MCP server and checks that:
1. The server instance exists
2. get_pricing_rate and health_check are registered
3. get_pricing_rate exposes the period/hotel/room parameters
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pricing_cache.server import mcp  # noqa: E402
import pricing_cache.tools  # noqa: E402,F401  Ensure tools are imported and registered

EXPECTED_TOOLS = {"get_pricing_rate", "health_check"}


async def verify_tool_registration() -> bool:
    """Verify the expected tools are registered."""
    print("=" * 60)
    print("MCP Tool Registration Verification")
    print("=" * 60)

    print(f"\n✓ MCP Server Instance: {mcp.name}")

    tools = await mcp.list_tools()
    print(f"\n✓ Total Tools Registered: {len(tools)}")

    print("\nRegistered Tools:")
    for i, tool in enumerate(tools, 1):
        print(f"  {i}. {tool.name}")

    names = {tool.name for tool in tools}
    missing = EXPECTED_TOOLS - names

    rate_tool = next((tool for tool in tools if tool.name == "get_pricing_rate"), None)
    if rate_tool is not None:
        print("\nget_pricing_rate Details:")
        print(f"  - Description: {(rate_tool.description or 'N/A')[:100]}...")
        properties = rate_tool.inputSchema.get("properties", {})
        print(f"  - Parameters: {', '.join(properties.keys())}")

    print("\n" + "=" * 60)
    if missing:
        print(f"✗ VERIFICATION FAILED: missing {', '.join(sorted(missing))}")
        print("=" * 60)
        return False

    print("✓ VERIFICATION SUCCESSFUL")
    print("=" * 60)
    return True


if __name__ == "__main__":
    try:
        success = asyncio.run(verify_tool_registration())
        sys.exit(0 if success else 1)
    except Exception as e:
        print(f"\n✗ ERROR: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
