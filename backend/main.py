from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .database import engine, Base
from .routers import admin, assessments, auth, customer_portal, files, organizations, quotes

logger = logging.getLogger("site_assessment")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

BASE_REVISION = "0001"


def _run_migrations():
    """Run pending Alembic migrations on startup.

    Databases created by Base.metadata.create_all() have the tables but no
    alembic_version table; those get the base revision stamped first so
    upgrade only applies what came after it.
    """
    try:
        from alembic.config import Config
        from alembic import command
        from sqlalchemy import inspect

        alembic_ini = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")
        if not os.path.exists(alembic_ini):
            logger.info("alembic.ini not found, skipping migrations")
            return

        alembic_cfg = Config(alembic_ini)

        # Override sqlalchemy.url from environment if DATABASE_URL is set
        database_url = os.environ.get("DATABASE_URL")
        if database_url:
            alembic_cfg.set_main_option("sqlalchemy.url", database_url)

        insp = inspect(engine)
        tables = insp.get_table_names()
        if "alembic_version" not in tables and "assessments" in tables:
            logger.info("Stamping base migration %s (tables already exist)", BASE_REVISION)
            command.stamp(alembic_cfg, BASE_REVISION)

        logger.info("Running pending Alembic migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("Migrations complete")

    except Exception as e:
        # Never let migration errors prevent app startup
        logger.warning("Alembic migration warning: %s", e)


app = FastAPI(
    title="Site Assessment Portal",
    description="Partner site assessments, quotes and customer approvals",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api")
app.include_router(organizations.router, prefix="/api")
app.include_router(assessments.router, prefix="/api")
app.include_router(files.router, prefix="/api")
app.include_router(quotes.router, prefix="/api")
app.include_router(customer_portal.router, prefix="/api")
app.include_router(admin.router, prefix="/api")

# Serve frontend static files
frontend_path = os.path.join(os.path.dirname(__file__), "..", "frontend")
if os.path.exists(frontend_path):
    static_path = os.path.join(frontend_path, "static")
    if os.path.exists(static_path):
        app.mount("/static", StaticFiles(directory=static_path), name="static")

    @app.get("/")
    def serve_frontend():
        return FileResponse(os.path.join(frontend_path, "index.html"))


@app.get("/health")
def health():
    return {"status": "ok", "app": "site-assessment-portal"}


@app.on_event("startup")
def auto_migrate():
    """Run pending Alembic migrations on startup."""
    _run_migrations()
