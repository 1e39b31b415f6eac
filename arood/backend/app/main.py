# backend/app/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import time

from app.core.config import settings
from app.core.exceptions import AroodError, UpstreamError
from app.core.logging import logger
from app.db.database import init_db, close_db
from app.api.v1.router import api_router
from app.services.email_service import EmailService
from app.services.media_storage import MediaStorage
from app.services.moyasar_service import MoyasarService


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Arood API")
    await init_db()

    # Shared services; pre-set instances (tests) are kept
    if not hasattr(app.state, "email_service"):
        app.state.email_service = EmailService()
    if not hasattr(app.state, "payment_gateway"):
        app.state.payment_gateway = MoyasarService()
    if not hasattr(app.state, "media_storage"):
        app.state.media_storage = MediaStorage()

    yield

    # Shutdown
    logger.info("Shutting down Arood API")
    await close_db()


app = FastAPI(
    title="Arood API",
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=("/api/docs" if settings.ENVIRONMENT == "development" else None),
    redoc_url=("/api/redoc" if settings.ENVIRONMENT == "development" else None),
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Include routers
app.include_router(api_router, prefix=settings.API_PREFIX)

# Uploaded campaign media
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.exception_handler(AroodError)
async def arood_error_handler(request: Request, exc: AroodError):
    if isinstance(exc, UpstreamError):
        logger.error(
            "Upstream failure",
            extra={"path": request.url.path, "error": exc.message_en},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.code,
                "detail": "تعذر إتمام العملية مع بوابة الدفع",
                "detail_en": "Payment gateway error",
            },
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg")})

    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_error",
            "detail": "البيانات المدخلة غير صحيحة",
            "detail_en": "Invalid request data",
            "errors": errors,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.exception("Unhandled exception while handling request", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "detail": "حدث خطأ في الخادم",
            "detail_en": "Internal server error",
        },
    )
