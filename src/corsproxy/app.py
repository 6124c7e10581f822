import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from mangum import Mangum

from corsproxy.routers import forward
from corsproxy.setting import DESCRIPTION, PROXY_TARGET, SUMMARY, TITLE, VERIFY_UPSTREAM_CERTIFICATE, VERSION

config = {
    "title": TITLE,
    "description": DESCRIPTION,
    "summary": SUMMARY,
    "version": VERSION,
}

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
app = FastAPI(**config)

if not VERIFY_UPSTREAM_CERTIFICATE:
    logging.warning(
        "Upstream certificate verification is disabled for %s. Set VERIFY_UPSTREAM_CERTIFICATE=true to enable it.",
        PROXY_TARGET,
    )


@app.get("/health")
async def health():
    """For health check if needed"""
    return {"status": "OK"}


# Catch-all, has to come after every other route
app.include_router(forward.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    logger = logging.getLogger(__name__)

    logger.warning(
        "Request validation failed: %s %s - %s",
        request.method,
        request.url.path,
        str(exc).split('\n')[0],
    )

    return PlainTextResponse(str(exc), status_code=400)


handler = Mangum(app)

if __name__ == "__main__":
    # Relayed Date/Server headers would otherwise be sent twice
    uvicorn.run(
        "corsproxy.app:app",
        host="0.0.0.0",  # nosec B104
        port=8000,
        reload=False,
        server_header=False,
        date_header=False,
    )
