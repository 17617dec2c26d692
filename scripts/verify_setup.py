#!/usr/bin/env python3
"""
Setup Verification Script

Validates configuration and data files before running the application,
and optionally pings a running server.

Usage:
    python scripts/verify_setup.py
    python scripts/verify_setup.py --server http://localhost:3000
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables
from dotenv import load_dotenv
load_dotenv()


def print_header(title: str) -> None:
    """Print section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print(f"{'='*60}")


def print_result(name: str, success: bool, message: str = "") -> None:
    """Print check result."""
    status = "[PASS]" if success else "[FAIL]"
    color = "\033[92m" if success else "\033[91m"
    reset = "\033[0m"
    msg = f" - {message}" if message else ""
    print(f"  {color}{status}{reset} {name}{msg}")


def check_env_file() -> bool:
    """Check if .env file exists (optional, defaults apply without it)."""
    env_path = project_root / ".env"
    if env_path.exists():
        print_result(".env file", True, "Found")
    else:
        print_result(".env file", True, "Not found, using defaults")
    return True


def check_dependencies() -> bool:
    """Check if required Python packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "pydantic",
        "pydantic_settings",
        "httpx",
        "dotenv",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print_result("Python packages", False, f"Missing: {', '.join(missing)}")
        return False
    print_result("Python packages", True, "All required packages installed")
    return True


def check_settings() -> bool:
    """Load settings and print the effective values."""
    try:
        from carespace.config import get_settings
        settings = get_settings()
    except Exception as e:
        print_result("Settings", False, str(e)[:80])
        return False

    print_result("Settings", True, f"{settings.app_name} ({settings.app_env})")
    print_result("DATA_DIR", True, str(settings.data_dir.resolve()))
    print_result("DEFAULT_DURATION_HOURS", True, f"{settings.default_duration_hours:g}")
    return True


def check_data_files() -> bool:
    """Check that each CSV file exists and parses."""
    from carespace.config import get_settings
    from carespace.infra.store import EntityStore

    settings = get_settings()
    paths = [
        ("Doctors", settings.doctors_path),
        ("Spaces", settings.spaces_path),
        ("Doctor calendars", settings.calendars_path),
        ("Bookings", settings.bookings_path),
    ]

    all_ok = True
    for name, path in paths:
        if path.exists():
            print_result(name, True, str(path))
        else:
            print_result(name, False, f"Not found: {path} (collection will be empty)")
            all_ok = False

    stats = EntityStore.from_settings(settings).load().stats()
    print_result("Loaded", True, ", ".join(f"{k}={v}" for k, v in stats.items()))
    return all_ok


def check_rule_tables() -> bool:
    """Check the optional compatibility rule file."""
    from carespace.config import get_settings
    from carespace.core.scheduling import load_rule_tables

    path = get_settings().activity_rules_file
    if path is None:
        print_result("Rule tables", True, "Built-in tables")
        return True
    if not Path(path).exists():
        print_result("Rule tables", False, f"Not found: {path}")
        return False

    tables = load_rule_tables(path)
    print_result(
        "Rule tables",
        True,
        f"{len(tables.activity_rules)} activity, {len(tables.specialty_rules)} specialty rules",
    )
    return True


async def check_server(url: str) -> bool:
    """Check if a running server answers the health endpoint."""
    import httpx

    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(f"{url}/api/health")
    except httpx.HTTPError:
        print_result("Server", False, f"Not reachable at {url}")
        return False

    if response.status_code == 200:
        data = response.json().get("data", {})
        print_result("Server", True, f"Healthy at {url} ({data})")
        return True
    print_result("Server", False, f"Responded with {response.status_code}")
    return False


async def main(server: str = "") -> int:
    """Run all verification checks."""
    print("\n" + "="*60)
    print(" CareSpace - Setup Verification")
    print("="*60)

    critical_failed = False
    all_passed = True

    print_header("Environment File")
    check_env_file()

    print_header("Python Dependencies")
    if not check_dependencies():
        critical_failed = True

    print_header("Settings")
    if not check_settings():
        critical_failed = True

    if not critical_failed:
        print_header("Data Files")
        if not check_data_files():
            all_passed = False

        print_header("Compatibility Rules")
        if not check_rule_tables():
            all_passed = False

    if server:
        print_header("Running Server")
        if not await check_server(server.rstrip("/")):
            all_passed = False

    print_header("Summary")

    if critical_failed:
        print("\n  \033[91mCRITICAL: Setup is incomplete.\033[0m")
        print("  Install the package with: pip install -e .")
        print()
        return 1
    elif not all_passed:
        print("\n  \033[93mWARNING: Some checks failed.\033[0m")
        print("  The application will start with empty collections where files are missing.")
        print()
        return 0
    else:
        print("\n  \033[92mAll checks passed!\033[0m")
        print("  You can start the application with:")
        print("    uvicorn carespace.main:app --reload --port 3000")
        print()
        return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Verify CareSpace setup")
    parser.add_argument("--server", default="", help="Base URL of a running server")
    args = parser.parse_args()

    exit_code = asyncio.run(main(args.server))
    sys.exit(exit_code)
