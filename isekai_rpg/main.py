import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.dependencies import get_catalog
from .api.routes import router
from .config import settings
from .managers.state_manager import init_db
from .utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    db_dir = os.path.dirname(settings.DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    await init_db()
    catalog = get_catalog()
    logger.info(f"Isekai RPG server started ({len(catalog.races)} races, {len(catalog.classes)} classes)")
    yield
    # Shutdown
    logger.info("Server shutting down")


app = FastAPI(
    title="Isekai RPG",
    description="Character build rules and dice engine for the Isekai RPG session manager",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Run with:
#   uvicorn isekai_rpg.main:app --host 0.0.0.0 --port 8000 --reload
app.include_router(router)
