#!/usr/bin/env python3
"""
Landlord Auditor Launcher Script

This script launches the Landlord Auditor Streamlit application.
"""

import subprocess
import sys
from pathlib import Path


def main():
    """Launch the Landlord Auditor app."""
    app_path = Path(__file__).parent / "landlord_audit" / "main.py"
    if not app_path.exists():
        import landlord_audit
        app_path = Path(landlord_audit.__file__).parent / "main.py"

    try:
        import streamlit  # noqa: F401
    except ImportError as e:
        print("Error: Missing required dependencies. Please install requirements:")
        print("pip install -r requirements.txt")
        print(f"Missing: {e}")
        sys.exit(1)

    print("🏠 Starting Landlord Auditor...")
    print("🌐 Opening in browser at: http://localhost:8501")
    print("⏹️  Press Ctrl+C to stop the application")
    print("-" * 50)

    try:
        subprocess.run([
            sys.executable, "-m", "streamlit", "run", str(app_path),
            "--server.port", "8501",
            "--server.address", "localhost"
        ])
    except KeyboardInterrupt:
        print("\n👋 Landlord Auditor stopped.")
    except OSError as e:
        print(f"Error launching app: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
