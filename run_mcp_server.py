#!/usr/bin/env python3
"""Convenience script to run the Google Drive MCP server from a checkout.

Usage:
    python run_mcp_server.py

Configuration comes from config/server.yaml, .env and the environment
(CLIENT_ID, CLIENT_SECRET, REFRESH_TOKEN, PORT).
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from gdrive_mcp.main import run


if __name__ == "__main__":
    run()
