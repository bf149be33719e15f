import logging
import os

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from sqlalchemy import inspect

from content_linkchecker.db import session as db
from content_linkchecker.db.models import Base

logger = logging.getLogger(__name__)


def _alembic_config_for_engine(engine) -> AlembicConfig:
    """
    Build an Alembic Config pointing to the project's alembic.ini and
    attach the current SQLAlchemy URL so 'alembic' CLI settings are not required.
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    ini_path = os.path.join(project_root, "alembic.ini")
    cfg = AlembicConfig(ini_path)
    cfg.set_main_option("sqlalchemy.url", engine.url.render_as_string(hide_password=False))
    if not cfg.get_main_option("script_location") or not os.path.isabs(
        cfg.get_main_option("script_location")
    ):
        cfg.set_main_option("script_location", os.path.join(project_root, "alembic"))
    return cfg


def init_db() -> None:
    """
    Initialize database schema.

    Strategy:
      - If the database already has an 'alembic_version' table, run migrations
        to 'head' (authoritative schema).
      - Otherwise create all tables from ORM metadata and stamp the DB to
        'head' so future runs use migrations cleanly.
    """
    engine = db.get_engine()
    inspector = inspect(engine)
    cfg = _alembic_config_for_engine(engine)

    if inspector.has_table("alembic_version"):
        logger.info("Alembic version table found. Applying migrations to head...")
        alembic_command.upgrade(cfg, "head")
        logger.info("Migrations applied successfully.")
    else:
        logger.info(
            "No alembic_version table detected. Creating ORM tables, then stamping head..."
        )
        Base.metadata.create_all(engine)
        alembic_command.stamp(cfg, "head")
        logger.info("Schema created and stamped to head.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
