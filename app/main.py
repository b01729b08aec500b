from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import logging
from pathlib import Path
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError

from app.core.config import settings
from app.middleware.request_logging import RequestLoggingMiddleware
from app.middleware.auth_logging import AuthLoggingMiddleware
from app.modules.auth.api.router import router as auth_router
from app.modules.user_management.api.router import router as user_router
from app.modules.posts.api.router import router as posts_router
from app.modules.posts.comments.api.router import router as comments_router
from app.modules.follows.api.router import router as follows_router
from app.modules.topics.api.router import router as topics_router
from app.modules.home_feed.api.router import router as home_feed_router
from app.modules.media.router import router as media_router
from app.db.init_db import create_all_tables

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    exception_handlers={
        RequestValidationError: request_validation_exception_handler,
        HTTPException: http_exception_handler,
    },
    debug=settings.DEBUG,
    description="Short-post social feed with mentions, topics and follows",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    logger.info(f"BASE_URL: {settings.BASE_URL}")

    create_all_tables()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Local fallback storage for images when R2 is not configured
Path(settings.UPLOAD_DIRECTORY).mkdir(parents=True, exist_ok=True)

# Register API routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["authentication"])
app.include_router(user_router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
app.include_router(comments_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}/comments", tags=["comments"])
app.include_router(follows_router, prefix=f"{settings.API_V1_STR}/follows", tags=["follows"])
app.include_router(topics_router, prefix=f"{settings.API_V1_STR}/topics", tags=["topics"])
app.include_router(home_feed_router, prefix=f"{settings.API_V1_STR}/feed", tags=["feed"])
app.include_router(media_router)

@app.get("/health")
def health_check():
    return {"status": "ok"}

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
