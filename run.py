import os

import uvicorn


if __name__ == "__main__":
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 8000))

    # Disable reload in production
    reload = os.getenv("ENV") == "development"

    uvicorn.run(
        "rentroll.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
        workers=1,  # one process, so the daily expiry job runs once
        lifespan="on",
    )
