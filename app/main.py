import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.errors import StoreError
from app.log import configure_logging
from app.middleware import TimingMiddleware
from app.routers import comments, posts, users

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Blog API",
    description="Posts, comments and users over a relational store",
    version="1.0.0",
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(users.router)


@app.exception_handler(RequestValidationError)
async def malformed_body(request: Request, exc: RequestValidationError):
    # The body did not even have the right JSON shape; field-level rules
    # live in the reconciler and are reported the same way.
    logger.debug("Malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Missing fields or invalid format!"})


@app.exception_handler(StoreError)
async def store_failure(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error!"})


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
