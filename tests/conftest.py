import os

# Keep module-level engine setup away from the dev database file
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from content_linkchecker.config import LinkcheckerSettings
from content_linkchecker.db.models import Base, ContentItem, FieldConfig

SITE_HOST = "localhost"
BASE_URL = f"http://{SITE_HOST}"


@pytest.fixture(scope="function")
def db():
    """Yield a session bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def settings():
    """Permissive settings: every category extracted, no blacklist, all link types."""
    return LinkcheckerSettings.from_mapping(
        {
            "extract.from_a": True,
            "extract.from_audio": True,
            "extract.from_embed": True,
            "extract.from_iframe": True,
            "extract.from_img": True,
            "extract.from_object": True,
            "extract.from_video": True,
            "check.disable_link_check_for_urls": "",
            "check_links_types": "all",
            "default_url_scheme": "http://",
            "base_path": SITE_HOST,
        }
    )


@pytest.fixture()
def make_content(db):
    """Create a ContentItem with one scanned body field (html_link_extractor)."""

    def _make(body_values, *, entity_type_id="node", url=None, scan=True, field="body"):
        exists = (
            db.query(FieldConfig)
            .filter_by(entity_type_id=entity_type_id, field_name=field)
            .one_or_none()
        )
        if exists is None:
            db.add(
                FieldConfig(
                    entity_type_id=entity_type_id,
                    field_name=field,
                    scan=scan,
                    extractor="html_link_extractor",
                )
            )
        item = ContentItem(entity_type_id=entity_type_id, url=url, title="Links")
        item.set_field(field, list(body_values))
        db.add(item)
        db.commit()
        if url is None:
            item.url = f"{BASE_URL}/node/{item.id}"
            db.commit()
        return item

    return _make
