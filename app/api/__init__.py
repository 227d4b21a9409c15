# API Routes
from app.api.health import router as health_router
from app.api.transactions import router as transactions_router
from app.api.stats import router as stats_router

__all__ = ["health_router", "transactions_router", "stats_router"]
