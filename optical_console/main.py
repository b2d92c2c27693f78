import logging

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from optical_console.core.config import settings
from optical_console.core.log_config import configure_logging
from optical_console.db.database import create_db_and_tables
from optical_console.routers.lenses import router as lenses_router
from optical_console.routers.lens_grid import router as lens_grid_router
from optical_console.routers.lens_costings import router as lens_costings_router

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title="Optical Console API",
    description="API for the optical practice console: lens stock grid, lens records and costings",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Lens stock
app.include_router(lenses_router, prefix="/lenses", tags=["lenses"])
app.include_router(lens_grid_router, prefix="/lens-grid", tags=["lens-grid"])

# Lens costings
app.include_router(lens_costings_router, prefix="/lens-costings", tags=["lens-costings"])

if __name__ == "__main__":
    uvicorn.run("optical_console.main:app", host="0.0.0.0", port=8000, reload=True)
