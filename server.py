#!/usr/bin/env python3
"""
Deploy Dashboard HTTP Server

Records deployment events posted by CI and serves the latest ones to the
dashboard page, which polls them.

Usage:
    python server.py

Then clients can:
- GET  /api/deploy?limit=20&projectName=svc-a - Latest deploy records
- POST /api/deploy - Record a deployment
- GET  /api/projects - Known project names
- POST /api/clean - Wipe all records
- POST /api/notify - Relay a push notification
"""

import os

from deploy_dashboard.main import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Get port from environment variable (for deployment) or default to 8000
    port = int(os.getenv("PORT", 8000))
    print(f"🚀 Deploy Dashboard on http://localhost:{port}")

    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level="info",
    )
