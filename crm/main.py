import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from crm.config import settings
from crm.core.exceptions import CRMException
from crm.core.logging import configure_logging
from crm.routes import (
    auth_routes,
    company_routes,
    contact_routes,
    deal_routes,
    activity_routes,
    note_routes,
)

configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger("crm.main")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_response(status_code: int, error: str, detail: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail},
        headers=headers,
    )


# Exception handlers
@app.exception_handler(CRMException)
async def crm_exception_handler(request: Request, exc: CRMException):
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return _error_response(exc.status_code, exc.error, exc.message, headers)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return _error_response(status.HTTP_400_BAD_REQUEST, "validation_error", "; ".join(messages))


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error"
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
prefix = settings.API_PREFIX
app.include_router(auth_routes.router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(company_routes.router, prefix=f"{prefix}/companies", tags=["Companies"])
app.include_router(contact_routes.router, prefix=f"{prefix}/contacts", tags=["Contacts"])
app.include_router(deal_routes.router, prefix=f"{prefix}/deals", tags=["Deals"])
app.include_router(activity_routes.router, prefix=f"{prefix}/activities", tags=["Activities"])
app.include_router(note_routes.router, prefix=f"{prefix}/notes", tags=["Notes"])
