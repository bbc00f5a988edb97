from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import uvicorn
from dotenv import load_dotenv

load_dotenv()

from app.routers import subscribers
from app.core.config import settings
from app.core.database import init_supabase
from app.core.exceptions import SubscriptionError
from app.services.launch_controller import get_launch_controller
from app.services.subscriber_store import get_subscriber_store

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the store, start the launch timer; cancel pending timers on shutdown"""
    logger.info("🚀 Starting StyleHub launch API...")
    if settings.STORE_BACKEND == "supabase":
        await init_supabase()
    controller = get_launch_controller()
    controller.start()
    logger.info(f"✅ Server is running on port {settings.API_PORT}")
    yield
    logger.info("🔄 Shutting down StyleHub launch API...")
    await controller.stop()

app = FastAPI(
    title="StyleHub Launch API",
    description="Coming-soon subscriptions and launch notifications",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(subscribers.router, prefix="/api")

@app.get("/health")
async def health_check(store=Depends(get_subscriber_store)):
    """Health check, including store connectivity"""
    try:
        await store.ping()
        return {
            "status": "healthy",
            "environment": settings.NODE_ENV,
            "version": "1.0.0",
            "store": "connected"
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "environment": settings.NODE_ENV,
            "version": "1.0.0",
            "store": "disconnected",
            "error": str(e)
        }

@app.get("/")
async def root():
    return {
        "message": "Welcome to StyleHub Launch API",
        "version": "1.0.0",
        "docs": "/docs"
    }

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "statusCode": status_code
        }
    )

@app.exception_handler(SubscriptionError)
async def subscription_exception_handler(request: Request, exc: SubscriptionError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return error_response(exc.status_code, "Server error")
    return error_response(exc.status_code, exc.message)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, exc.detail)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return error_response(400, "Invalid request body")

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        log_level="info"
    )
