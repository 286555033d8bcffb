from fastapi import APIRouter

from .books import router as books_router
from .borrowings import router as borrowings_router
from .reports import router as reports_router
from .dashboard import router as dashboard_router
from .inventory import router as inventory_router

# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(books_router, tags=["Books"])
api_router.include_router(borrowings_router, tags=["Borrowings"])
api_router.include_router(reports_router, tags=["Reports"])
api_router.include_router(dashboard_router, tags=["Dashboard"])
api_router.include_router(inventory_router, tags=["Inventory"])
