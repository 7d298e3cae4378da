from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging

# Rate limiting imports
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Load environment variables from .env file
load_dotenv()

from script_analyzer.core.config import settings
from script_analyzer.core.rate_limit import limiter
from script_analyzer.middleware.payload_size_limiter import PayloadSizeLimiter
from script_analyzer.middleware.timing import log_request_timing
from script_analyzer.routers import analysis_router, health_router, script_router
from script_analyzer.services import analysis_state_store
from script_analyzer.services.analysis_state_store import initialize_state_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="Script Analyzer API",
    description="Backend API for AI-assisted TV and film script analysis",
    version="1.0.0"
)

# Add limiter to app state
app.state.limiter = limiter

# Register rate limit exceeded handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Request timing logs
app.middleware("http")(log_request_timing)

# Payload size limiter middleware (inner middleware); 64KB covers multipart overhead
app.add_middleware(
    PayloadSizeLimiter,
    max_bytes=settings.MAX_UPLOAD_BYTES + 64 * 1024,
    path_prefixes=("/api/scripts/upload", "/api/analysis"),
)

# CORS middleware - add last so it's outermost and always applies headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Client-Id", "X-Requested-With"],
    expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    max_age=600,
)

# Include routers
app.include_router(health_router.router, prefix="/api", tags=["health"])
app.include_router(analysis_router.router, prefix="/api")
app.include_router(script_router.router, prefix="/api")


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """Connect the analysis state store."""
    try:
        store = initialize_state_store(settings.REDIS_URL)
        await store.connect()
        print(f"✅ Redis connected at {settings.REDIS_URL}")
    except Exception as e:
        print(f"⚠️  Redis connection failed: {e}")
        print("   Analyses will still run, but results will not be saved")

    if not settings.ANTHROPIC_API_KEY:
        print("⚠️  ANTHROPIC_API_KEY is not set; analysis requests will fail")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    store = analysis_state_store.analysis_state_store
    if store:
        try:
            await store.disconnect()
            print("✅ Redis disconnected")
        except Exception as e:
            print(f"Error disconnecting Redis: {e}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
