#!/usr/bin/env python3
"""Start the routing API with uvicorn, honouring the PORT environment variable."""

import os
import sys
from pathlib import Path

import uvicorn

src_path = Path(__file__).resolve().parent / "src"
if not src_path.is_dir():
    print(f"Warning: src directory not found at {src_path}", file=sys.stderr)
sys.path.insert(0, str(src_path))

port = os.environ.get("PORT", "8000")
try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

# Fail fast with a readable message if the app cannot be imported
try:
    import aquaroute.main  # noqa: F401
except Exception as e:
    print(f"Failed to import aquaroute.main: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc(file=sys.stderr)
    sys.exit(1)

print(f"Starting server on port {port_int}...", file=sys.stderr)
uvicorn.run(
    "aquaroute.main:app",
    host="0.0.0.0",
    port=port_int,
    proxy_headers=True,
    forwarded_allow_ips="*",
)
