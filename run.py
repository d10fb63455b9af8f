#!/usr/bin/env python3
"""
WePay Entry Point

Starts the FastAPI server for the group ledger.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from wepay.api import run_server
from wepay.config import get_config


if __name__ == "__main__":
    config = get_config()
    print(f"Starting WePay group ledger on http://{config.api_host}:{config.api_port}")
    print(f"Storage backend: {config.storage_backend}")
    print()
    
    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=config.api_reload
        )
    except KeyboardInterrupt:
        print("\nShutting down WePay...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
