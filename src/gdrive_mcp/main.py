"""Main entry point for the Google Drive MCP Server.

Run with ``python -m gdrive_mcp.main`` or the ``gdrive-mcp-server`` script.
"""

import asyncio
import sys

from .server import create_server


async def main() -> None:
    """Create the server from configuration and serve until interrupted."""
    try:
        server = create_server()
        await server.start()
    except KeyboardInterrupt:
        print("\nServer interrupted by user", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Failed to start server: {e}", file=sys.stderr)
        sys.exit(1)


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
