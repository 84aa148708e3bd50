"""FastAPI application entry point."""
import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from evano.api.router import api_router
from evano.core.config import settings
from evano.core.supabase_rest_client import close_supabase_rest, get_supabase_rest
from evano.state import MemorySessionStore

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s v%s", settings.app_name, settings.api_version)
    logger.info("CORS origins: %s", settings.cors_origins_list)

    try:
        get_supabase_rest()
        logger.info("Supabase REST client ready")
    except ValueError as e:
        logger.warning("Supabase connection warning: %s", e)

    try:
        yield
    finally:
        logger.info("Shutting down...")
        await close_supabase_rest()


app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.session_store = MemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
app.include_router(api_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to log all errors."""
    logger.error("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    logger.debug(traceback.format_exc())
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": type(exc).__name__}
    )
