import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from library_api.core.config import settings
from library_api.core.database import create_tables, dispose_engine
from library_api.api.v1.router import api_router

logging.basicConfig(
    level=logging.DEBUG if settings.SQL_ECHO else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting School Library API ({settings.ENVIRONMENT})")

    await create_tables()
    logger.info("Library tables ready: books, borrowings, inventory")

    yield

    await dispose_engine()
    logger.info("School Library API stopped, database connections closed")


app = FastAPI(
    title="School Library API",
    description="Book catalog, borrowing workflow, inventory and reports for a school library",
    version=API_VERSION,
    lifespan=lifespan,
    redirect_slashes=False,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

# The SPA dev server plus the deployed frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "message": "School Library API",
        "version": API_VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": None if settings.is_production else "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "school-library-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("library_api.main:app", host=settings.API_HOST, port=settings.API_PORT)
