"""
Setup verification script for the Rankify backend.
Checks dependencies, configuration and that the hosted platform answers.
"""
import asyncio
import sys
import os
from typing import List, Tuple

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"


def print_status(message: str, status: bool):
    """Print colored status message."""
    symbol = f"{GREEN}✓{RESET}" if status else f"{RED}✗{RESET}"
    print(f"{symbol} {message}")


async def check_python_version() -> bool:
    """Check Python version is 3.11+."""
    version = sys.version_info
    if version.major == 3 and version.minor >= 11:
        print_status(f"Python version: {version.major}.{version.minor}.{version.micro}", True)
        return True
    else:
        print_status(f"Python version {version.major}.{version.minor} (requires 3.11+)", False)
        return False


async def check_dependencies() -> bool:
    """Check if required packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "pydantic_settings",
        "httpx",
        "fitz",
        "multipart",
    ]

    all_installed = True
    for package in required_packages:
        try:
            __import__(package)
            print_status(f"Package '{package}' installed", True)
        except ImportError:
            print_status(f"Package '{package}' missing", False)
            all_installed = False

    return all_installed


async def check_env_file() -> bool:
    """Check if .env file exists."""
    if os.path.exists(".env"):
        print_status(".env file exists", True)
        return True
    else:
        print_status(".env file missing (settings fall back to defaults)", False)
        return False


async def check_credentials() -> bool:
    """Check that a token or username/password is configured for sign-in."""
    from rankify.config import settings

    has_token = bool(settings.PLATFORM_API_TOKEN)
    has_login = bool(settings.PLATFORM_USERNAME and settings.PLATFORM_PASSWORD)
    print_status(f"PLATFORM_API_TOKEN: {'Set' if has_token else 'Not set'}", has_token)
    print_status(
        f"PLATFORM_USERNAME / PLATFORM_PASSWORD: {'Set' if has_login else 'Not set'}",
        has_login,
    )
    return has_token or has_login


async def check_platform() -> bool:
    """Check the platform host answers and report the sign-in status."""
    from rankify.platform.client import PlatformClient
    from rankify.platform.http import HttpPlatform

    handle = HttpPlatform()
    try:
        if not await handle.ping():
            print_status(f"Platform at {handle.base_url} not reachable", False)
            return False
        print_status(f"Platform at {handle.base_url} is reachable", True)

        client = PlatformClient()
        client.locator.bind(handle)
        signed_in = await client.auth.check_auth_status()
        if signed_in:
            print_status(f"Signed in as {client.auth.user.username}", True)
        else:
            detail = client.global_error or "no valid token"
            print_status(f"Not signed in ({detail})", False)
            print(f"  {YELLOW}POST /api/auth/sign-in once the server is running{RESET}")
        return True
    finally:
        await handle.aclose()


async def main():
    """Run all verification checks."""
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}Rankify Backend - Setup Verification{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

    checks: List[Tuple[str, callable]] = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Environment File", check_env_file),
        ("Platform Credentials", check_credentials),
        ("Platform Host", check_platform),
    ]

    results = []

    for check_name, check_func in checks:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            result = await check_func()
            results.append(result)
        except Exception as e:
            print_status(f"Error during check: {str(e)}", False)
            results.append(False)

    # Summary
    print(f"\n{BLUE}{'='*60}{RESET}")
    passed = sum(results)
    total = len(results)

    if passed == total:
        print(f"{GREEN}✓ All checks passed! ({passed}/{total}){RESET}")
        print(f"\n{GREEN}You're ready to run the backend:{RESET}")
        print(f"  uvicorn rankify.main:app --reload")
    else:
        print(f"{RED}✗ Some checks failed ({passed}/{total} passed){RESET}")
        print(f"\n{YELLOW}Please fix the issues above before running the backend.{RESET}")
        sys.exit(1)

    print(f"{BLUE}{'='*60}{RESET}\n")


if __name__ == "__main__":
    asyncio.run(main())
