"""
Main FastAPI application entry point.
Wires routes, error mapping and request logging for the Media Vault API,
served by uvicorn locally and by Mangum on AWS Lambda.
"""
import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum
from src.core.config import settings
from src.core.exception_handler import register_exception_handlers
from src.core.logging_config import setup_logging
from src.api.routes import auth_routes, file_routes, health_routes, payment_routes, upload_routes

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Media storage service with chunked uploads and storage plans",
    root_path=f"/{settings.environment}"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_allowed_origins.split(",") if origin.strip()],
    allow_methods=["*"],
    allow_headers=["authorization", "content-type"]
)

register_exception_handlers(app)

for router in (health_routes.router, auth_routes.router, upload_routes.router,
               file_routes.router, payment_routes.router):
    app.include_router(router)


@app.middleware("http")
async def log_request(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000
    )
    return response


# AWS Lambda entry point
handler = Mangum(app, lifespan="off")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
