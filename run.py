import os
import uvicorn

if __name__ == "__main__":
    host = os.environ.get("PAIRROOM_HOST", "localhost")
    port = int(os.environ.get("PAIRROOM_PORT", "5000"))
    reload = os.environ.get("PAIRROOM_RELOAD", "0") == "1"
    uvicorn.run(
        "pairroom.server:asgi_app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["pairroom"] if reload else None,
        log_level=os.environ.get("PAIRROOM_LOG_LEVEL", "info"),
    )
