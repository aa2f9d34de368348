import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from degreeplan.api.routes import router as api_router
from degreeplan.core.config import settings
from degreeplan.core.database import engine
from degreeplan.core.logging import configure_logging
from degreeplan.models.base import Base
import degreeplan.models  # noqa: F401

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Degree Planner API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    logger.info(f"Degree planner API started ({settings.environment})")


@app.get("/health")
def health_check():
    return {"status": "ok"}
