import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from coach import router as coach_router
from core import config, db
from core.errors import error_body, register_error_handlers
from core.frontend import SPAStaticFiles
from core.logging import configure_logging
from core.ratelimit import FixedWindowRateLimiter
from quotes import router as quotes_router
from savings import router as savings_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # Quotes and coach work without a database; savings routes report 500 until one is configured.
    if db.is_configured():
        await db.init_pool()
        await db.apply_schema()
    else:
        logger.warning("db_disabled reason=DATABASE_URL_not_set")
    logger.info("service_started service=%s port=%s", config.service_name(), config.port())
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title=config.service_name(), lifespan=lifespan)
register_error_handlers(app)

rate_limiter = FixedWindowRateLimiter(
    max_requests=config.rate_limit_max(),
    window_s=config.rate_limit_window_s(),
)


async def rate_limit(request: Request, call_next):
    client_key = request.client.host if request.client else "unknown"
    decision = rate_limiter.hit(client_key)
    if not decision.allowed:
        logger.warning("rate_limited client=%s path=%s", client_key, request.url.path)
        return JSONResponse(
            status_code=429,
            content=error_body("too_many_requests"),
            headers=decision.headers(),
        )
    response = await call_next(request)
    response.headers.update(decision.headers())
    return response


# Last added runs first: CORS answers preflights and decorates 429s before the limiter counts anything.
app.add_middleware(BaseHTTPMiddleware, dispatch=rate_limit)
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict:
    return {"ok": True, "service": config.service_name()}


app.include_router(quotes_router.router, tags=["quotes"])
app.include_router(coach_router.router, tags=["coach"])
app.include_router(savings_router.router, tags=["savings"])


@app.api_route(
    "/api/{rest:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
def api_not_found(rest: str) -> None:
    raise HTTPException(status_code=404, detail="not_found")


# Mounted last so every API route wins over it.
frontend_files = SPAStaticFiles(directory=config.public_dir(), html=True, check_dir=False)
app.mount("/", frontend_files, name="frontend")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.port())
