"""FastAPI application for Property Scout."""
from fastapi import FastAPI

from property_scout.api.routes import analysis, profile, search

app = FastAPI(
    title="Property Scout",
    description="Natural-language property search with scoring and market analysis",
    version="0.1.0"
)

# API Routes
app.include_router(search.router, prefix="/api", tags=["search"])
app.include_router(analysis.router, prefix="/api/analysis", tags=["analysis"])
app.include_router(profile.router, prefix="/api", tags=["profile"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
