"""
Store Insights - Backend API
Admin analytics and custom admin/store routes for a Pakistan-market store
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from store_insights.api import analytics, marketing, orders, reports, store
from store_insights.api.deps import get_connector
from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Include API routers
app.include_router(analytics.router)
app.include_router(marketing.router)
app.include_router(orders.router)
app.include_router(reports.router)
app.include_router(store.router)


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "Store Insights API",
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
    }


@app.get("/health")
async def health(connector: MedusaConnector = Depends(get_connector)):
    """Health check - pings the commerce backend"""
    backend_ok = await connector.health()
    if not backend_ok:
        logger.warning(f"Commerce backend at {connector.base_url} is not healthy")
    return {
        "status": "healthy" if backend_ok else "degraded",
        "api": "online",
        "backend": {
            "url": connector.base_url,
            "status": "connected" if backend_ok else "unreachable",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("store_insights.main:app", host="0.0.0.0", port=8000, reload=True)
