from videodiary.analysis import routes as analysis_router
from videodiary.ingestion import routes as ingestion_router
from videodiary.journals import routes as journals_router
from videodiary.system import routes as system_router
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from videodiary.core.config import CORS_ORIGINS, LOG_LEVEL
from videodiary.core.database import Base, engine
from videodiary.core.logging import setup_logging
import videodiary.journals.models  # noqa: F401  registers tables

setup_logging(LOG_LEVEL)

app = FastAPI(
    title="Video Diary API",
    version="1.0.0",
    description="Backend for mood-tagged video journaling: Mux ingestion, transcripts and AI-driven insights.",
)

# CORS config
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(ingestion_router.router)
app.include_router(ingestion_router.webhook_router)
app.include_router(journals_router.router)
app.include_router(analysis_router.router)
app.include_router(system_router.router)


# DB Tables
@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)
