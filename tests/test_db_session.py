import pytest
from sqlalchemy import text

from content_linkchecker.db import session as db_session
from content_linkchecker.db.models import FieldConfig


@pytest.fixture()
def file_db(tmp_path):
    """Point the global engine at a throwaway SQLite file for one test."""
    previous = db_session.DATABASE_URL
    url = f"sqlite:///{tmp_path / 'nested' / 'links.db'}"
    db_session.reconfigure_database(url)
    try:
        yield url
    finally:
        db_session.reconfigure_database(previous)


def test_reconfigure_creates_parent_dir_and_connects(file_db, tmp_path):
    assert (tmp_path / "nested").is_dir()
    assert db_session.get_engine().url.render_as_string() == file_db
    assert db_session.ping_db() is True

    with db_session.get_engine().connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_session_scope_commits_and_rolls_back(file_db):
    db_session.create_all()

    with db_session.session_scope() as s:
        s.add(FieldConfig(entity_type_id="node", field_name="body", scan=True))

    with pytest.raises(RuntimeError):
        with db_session.session_scope() as s:
            s.add(FieldConfig(entity_type_id="node", field_name="summary", scan=True))
            raise RuntimeError("abort")

    s = db_session.get_session()
    try:
        assert [c.field_name for c in s.query(FieldConfig).all()] == ["body"]
    finally:
        s.close()
