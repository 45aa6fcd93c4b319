#!/usr/bin/env python3
# backend/run.py
"""
Local server runner.

Creates the tables (and the range exclusion guard) on startup through the
app lifespan, then serves the API with auto-reload.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn  # noqa: E402

from courtbook.core.config import settings  # noqa: E402

if __name__ == "__main__":
    print(f"Starting {settings.facility_name} API ({settings.environment})")
    print(f"Database: {settings.database_url}")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run(
        "courtbook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
