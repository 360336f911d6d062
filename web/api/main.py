"""FastAPI content API: auth, blog posts, loadout, changelog, uploads."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from cms.models.base import init_db
from web.api import changelog_routes, loadout_routes, post_routes
from web.api.auth_routes import router as auth_router
from web.api.upload_routes import router as upload_router
from web.api.user_routes import router as user_router
from web.sessions import get_session_store, sweep_sessions_forever

logger = logging.getLogger("sinsane.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    store = app.dependency_overrides.get(get_session_store, get_session_store)()
    sweeper = asyncio.create_task(
        sweep_sessions_forever(store, config.SESSION_SWEEP_INTERVAL_SECONDS)
    )
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


app = FastAPI(title="Sinsane Content API", lifespan=lifespan)

if config.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def limit_upload_body(request: Request, call_next):
    """Refuse uploads whose declared body size is over the ceiling before the form is parsed."""
    if request.method == "POST" and request.url.path == "/api/upload":
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                return JSONResponse({"error": "Invalid Content-Length"}, status_code=400)
            if size > config.UPLOAD_MAX_BYTES + config.UPLOAD_FORM_OVERHEAD_BYTES:
                logger.warning("Upload refused before parsing: %d bytes declared", size)
                return JSONResponse({"error": "File too large"}, status_code=400)
    return await call_next(request)


# Every failure leaves the API as {"error": message}


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        loc = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"Invalid {loc}: {errors[0].get('msg')}" if loc else errors[0].get("msg")
    else:
        message = "Invalid request"
    return JSONResponse({"error": message}, status_code=400)


@app.exception_handler(SQLAlchemyError)
async def database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Database error"}, status_code=500)


@app.exception_handler(Exception)
async def server_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Server error"}, status_code=500)


app.include_router(auth_router)
app.include_router(upload_router)
app.include_router(post_routes.public_router)
app.include_router(post_routes.admin_router)
app.include_router(loadout_routes.public_router)
app.include_router(loadout_routes.admin_router)
app.include_router(changelog_routes.public_router)
app.include_router(changelog_routes.admin_router)
app.include_router(user_router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
