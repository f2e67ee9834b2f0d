"""
FastAPI application entry point for the issuetrack API.

Provides REST endpoints for issues, issue search, projects, labels and
comments, and maps domain errors to HTTP responses.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from issuetrack import __version__
from issuetrack.api.routes import comments, health, issues, labels, projects, search
from issuetrack.core.config import get_cors_origins
from issuetrack.core.errors import (
    ConflictError,
    IndexWriteFailed,
    MaintenanceInProgress,
    NotFoundError,
    SearchUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="issuetrack API", version=__version__)

# CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SearchUnavailable)
async def search_unavailable_handler(request: Request, exc: SearchUnavailable):
    logger.error("Search failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Search failed"})


@app.exception_handler(IndexWriteFailed)
async def index_write_failed_handler(request: Request, exc: IndexWriteFailed):
    logger.error("Issue write rolled back for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Failed to save issue"})


@app.exception_handler(MaintenanceInProgress)
async def maintenance_handler(request: Request, exc: MaintenanceInProgress):
    return JSONResponse(
        status_code=503,
        content={"error": "Search index maintenance in progress"},
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": details},
    )


# Include routers; search goes first so /issues/search is not read as an issue id
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(issues.router, prefix="/api", tags=["issues"])
app.include_router(comments.router, prefix="/api", tags=["comments"])
app.include_router(projects.router, prefix="/api", tags=["projects"])
app.include_router(labels.router, prefix="/api", tags=["labels"])
app.include_router(health.router, prefix="/api", tags=["health"])
