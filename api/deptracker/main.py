"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from deptracker.core.config import settings
from deptracker.core.database import SessionLocal, engine
from deptracker.api import dependencies, metrics, recommendations, optimization, integrations, jira, webhooks, ws
from deptracker.models import Base
from deptracker.seed import seed_sample_data

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if settings.SEED_SAMPLE_DATA:
        db = SessionLocal()
        try:
            seed_sample_data(db)
        finally:
            db.close()
    if settings.JIRA_DEMO_MODE:
        logger.warning("Jira demo mode enabled: serving synthetic issues")
    yield


app = FastAPI(title="Cross-ART Dependency Tracker", version="1.0.0", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(dependencies.router, prefix="/dependencies", tags=["dependencies"])
app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])
app.include_router(recommendations.router,
                   prefix="/recommendations", tags=["recommendations"])
app.include_router(optimization.router,
                   prefix="/optimization", tags=["optimization"])
# Issue-tracker integration
app.include_router(integrations.router,
                   prefix="/integrations", tags=["integrations"])
app.include_router(jira.router, prefix="/jira", tags=["jira"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
# Live updates
app.include_router(ws.router, tags=["ws"])


@app.get("/")
def read_root():
    return {"message": "Cross-ART Dependency Tracker API"}
