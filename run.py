#!/usr/bin/env python3
"""
Noor API - Application Runner
"""
import logging
import os

import uvicorn

from noor.config import LOG_FORMAT, LOG_LEVEL

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL.upper(), format=LOG_FORMAT)

    port = int(os.getenv("PORT", "8000"))
    print("=" * 50)
    print("Noor API")
    print("=" * 50)
    print()
    print(f"Starting server at: http://localhost:{port}")
    print()
    print("Endpoints:")
    print(f"  - Quran:  http://localhost:{port}/api/quran")
    print(f"  - Hadith: http://localhost:{port}/api/hadith")
    print(f"  - Health: http://localhost:{port}/api/health")
    print()
    print(f"API Documentation:  http://localhost:{port}/api/docs")
    print()
    print("=" * 50)

    uvicorn.run(
        "noor.api.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_config=None,
    )
