import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from arena.api.endpoints import competitors as competitor_endpoints
from arena.api.endpoints import matches as match_endpoints
from arena.api.endpoints import tournaments as tournament_endpoints
from arena.core.config import settings
from arena.core.exceptions import ArenaError
from arena.models import create_tables

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info("Database ready at %s", settings.DATABASE_URL)
    yield


app = FastAPI(title="Esports Arena API", lifespan=lifespan)


@app.exception_handler(ArenaError)
async def arena_error_handler(request: Request, exc: ArenaError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Include routers
app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
app.include_router(competitor_endpoints.router, prefix="/competitors", tags=["Competitors"])
app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])


@app.get("/")
async def root():
    return {"message": "Esports Arena API"}
