#!/usr/bin/env python3
"""List the tools the server registers with FastMCP, grouped by category."""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gdrive_mcp.server import create_server


async def list_tools():
    print("Creating MCP server...")
    server = create_server({"transport": {"type": "stdio"}, "logging": {"level": "WARNING"}})
    server._register_capabilities()

    tools = await server.mcp.list_tools()
    descriptions = {tool.name: tool.description for tool in tools}

    for category, count in sorted(server.tool_registry.categories().items()):
        print(f"\n{category} ({count})")
        for name in server.tool_registry.list_tools(category):
            print(f"  - {name}: {descriptions.get(name, '')[:60]}")

    print("\n" + "=" * 50)
    print(f"  - FastMCP tools: {len(tools)}")
    print(f"  - Internal registry: {server.tool_registry.count()}")
    print("=" * 50)
    return 0 if len(tools) == server.tool_registry.count() else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(list_tools()))
