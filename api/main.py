import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from api.routes.features import router as features_router
from infrastructure.metrics import get_metrics_response

app = FastAPI(title="Log-Mel Feature Service")

# CORS — allow the browser recorder UI (dev server) to post captured audio
# Include both localhost and 127.0.0.1 variants — browsers treat them as different origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(features_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Return a simple liveness check."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format.
    Returns empty response if prometheus_client is not installed.
    """
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)


def serve() -> None:
    """Run the service with uvicorn.

    Environment:
        MELSPEC_HOST   Bind address (default 127.0.0.1).
        MELSPEC_PORT   Port (default 8000).
    """
    uvicorn.run(
        app,
        host=os.environ.get("MELSPEC_HOST", "127.0.0.1"),
        port=int(os.environ.get("MELSPEC_PORT", "8000")),
        log_level="info",
    )


if __name__ == "__main__":
    serve()
