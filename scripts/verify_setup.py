#!/usr/bin/env python3
"""Script to verify the Google Drive MCP server environment."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def check_python_version():
    """Check Python version >= 3.10."""
    version = sys.version_info
    if version >= (3, 10):
        print(f"✓ Python {version.major}.{version.minor}.{version.micro}")
        return True
    print(f"✗ Python {version.major}.{version.minor}.{version.micro} (need 3.10+)")
    return False


def check_package(module_name, distribution):
    """Check that a module imports; name the distribution to install if not."""
    try:
        __import__(module_name)
        print(f"✓ {module_name} installed")
        return True
    except ImportError:
        print(f"✗ {module_name} not installed (pip install {distribution})")
        return False


def check_path(path):
    if Path(path).exists():
        print(f"✓ {path} exists")
        return True
    print(f"✗ {path} missing")
    return False


def check_credentials():
    """Check that OAuth credentials resolve from .env, environment or YAML."""
    from gdrive_mcp.config import credentials_configured, load_config

    config = load_config()
    if credentials_configured(config):
        print("✓ CLIENT_ID, CLIENT_SECRET and REFRESH_TOKEN configured")
        return True
    missing = [
        key for key in ("client_id", "client_secret", "refresh_token")
        if not config["credentials"].get(key)
    ]
    print(f"✗ Missing credentials: {', '.join(missing)}")
    return False


def main():
    """Run all verification checks."""
    print("=" * 60)
    print("Google Drive MCP Server Environment Verification")
    print("=" * 60)
    print()

    checks = []

    print("Checking Python version...")
    checks.append(check_python_version())
    print()

    print("Checking required packages...")
    required_packages = [
        ("mcp", "mcp"),
        ("yaml", "pyyaml"),
        ("dotenv", "python-dotenv"),
        ("googleapiclient", "google-api-python-client"),
        ("google.oauth2", "google-auth"),
        ("google_auth_httplib2", "google-auth-httplib2"),
        ("httplib2", "httplib2"),
    ]
    for module_name, distribution in required_packages:
        checks.append(check_package(module_name, distribution))
    print()

    print("Checking test packages...")
    for module_name, distribution in [("pytest", "pytest"), ("pytest_asyncio", "pytest-asyncio")]:
        checks.append(check_package(module_name, distribution))
    print()

    print("Checking project structure...")
    for path in ["src/gdrive_mcp", "src/gdrive_mcp/tools", "src/gdrive_mcp/drive", "tests"]:
        checks.append(check_path(path))
    print()

    print("Checking configuration...")
    checks.append(check_path("pyproject.toml"))
    checks.append(check_path("config/server.yaml"))
    checks.append(check_credentials())
    print()

    print("=" * 60)
    passed = sum(checks)
    total = len(checks)
    print(f"Results: {passed}/{total} checks passed")
    print("=" * 60)

    if passed == total:
        print("✓ All checks passed! Environment is ready.")
        return 0
    print("✗ Some checks failed. Please review the output above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
