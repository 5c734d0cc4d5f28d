#!/usr/bin/env python
"""
Setup script for League Tracker.

This script handles:
1. Installing Python dependencies
2. Creating the local data directory

Usage:
    python setup.py

Packaging metadata lives in pyproject.toml; this script only bootstraps a
development virtual environment.
"""

import os
import subprocess
import sys
from pathlib import Path


def run_command(cmd, description):
    """Run a command and handle errors."""
    print(f"\n{'='*50}")
    print(f"[*] {description}")
    print(f"{'='*50}")

    try:
        subprocess.run(cmd, shell=True, check=True)
        print(f"[+] Success: {description}")
        return True
    except subprocess.CalledProcessError as e:
        print(f"[-] Failed: {description}")
        print(f"    Error: {e}")
        return False


def check_venv():
    """Ensure script is running from a .venv virtual environment."""
    venv_path = sys.prefix

    if not (venv_path.endswith('.venv') or '/.venv' in venv_path or '\\.venv' in venv_path):
        print("[-] Error: Please run this script from a .venv virtual environment.")
        print("")
        print("    To create and activate a virtual environment:")
        print("      python -m venv .venv")
        print("")
        print("    On Windows:")
        print("      .venv\\Scripts\\activate")
        print("")
        print("    On macOS/Linux:")
        print("      source .venv/bin/activate")
        print("")
        print("    Then run this script again:")
        print("      python setup.py")
        return False
    return True


def main():
    print("=" * 60)
    print("  League Tracker - Setup")
    print("=" * 60)

    if not check_venv():
        return 1

    script_dir = Path(__file__).parent

    # Step 1: Install the package with test dependencies
    if not run_command(
        f"{sys.executable} -m pip install -e \"{script_dir}[test]\"",
        "Installing Python dependencies"
    ):
        print("\n[-] Failed to install Python dependencies")
        return 1

    # Step 2: Create data directory
    data_dir = Path(os.environ.get('DATA_DIR') or script_dir / "data")
    data_dir.mkdir(parents=True, exist_ok=True)
    print(f"\n[+] Created data directory: {data_dir}")

    print("\n" + "=" * 60)
    print("  Setup Complete!")
    print("=" * 60)
    print("\nTo run the application:")
    print("  uvicorn leaguetracker.main:app --reload")
    print("\nTo use Supabase instead of the local SQLite store:")
    print("  run scripts/supabase_schema.sql, then set DB_TYPE=supabase,")
    print("  SUPABASE_URL and SUPABASE_KEY")
    print("\nTo print a fixture schedule:")
    print("  python -m leaguetracker.services.fixtures 5 circle")

    return 0


if __name__ == "__main__":
    sys.exit(main())
