from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from mapchat.core.config import settings
from mapchat.core.llm_connection import llm_client
from mapchat.core.middleware import build_rate_limiter, limit_only_prefix, log_requests, rate_limit_exceeded_handler
from mapchat.routes.base_chat import router
from mapchat.routes.directions_route import router as directions_router
from mapchat.routes.geo_route import router as geo_router
from mapchat.routes.places_route import router as places_router

app = FastAPI(title="MapChat API")

# Setup rate limiting
limiter = build_rate_limiter(settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.middleware("http")(log_requests)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")
app.include_router(places_router, prefix="/api")
app.include_router(geo_router, prefix="/api")
app.include_router(directions_router, prefix="/api")

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {
        "message": "Welcome to MapChat API",
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "chat": "/api/chat",
            "places": "/api/places/search",
            "details": "/api/places/details",
            "directions": "/api/directions",
            "geocode": "/api/geocode",
            "reverse_geocode": "/api/reverse-geocode",
            "distance": "/api/distance",
            "map_embed": "/api/map/embed",
            "docs": "/docs"
        },
        "version": "1.0.0"
    }

# --- Health Check ---
@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "google_maps_configured": bool(settings.GOOGLE_MAPS_API_KEY),
        "llm_provider": llm_client.provider.get_provider_name(),
    }

# Only /api/ routes count against the limit
limit_only_prefix(app, limiter)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mapchat.main:app", host="0.0.0.0", port=8000, reload=True)
