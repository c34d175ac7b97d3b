#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Uses the console email transport and the local SQLite store unless the
BOOKING_* environment says otherwise.
"""
from pathlib import Path
import sys

backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "booking_engine.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
