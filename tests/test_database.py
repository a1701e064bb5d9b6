"""
Test Database Lifecycle
"""
import pytest
from sqlalchemy import inspect

from vidvault import database


@pytest.fixture(autouse=True)
def restore_state():
    yield
    database.close_db()


def test_get_db_before_init_raises():
    database.close_db()

    with pytest.raises(RuntimeError):
        next(database.get_db())


def test_init_db_creates_tables():
    engine = database.init_db("sqlite://")

    assert "videos" in inspect(engine).get_table_names()
    assert database.get_engine() is engine


def test_sessions_share_in_memory_database():
    database.init_db("sqlite://")
    from vidvault.models import Video

    gen = database.get_db()
    db = next(gen)
    db.add(Video(title="Shared", public_id="video/shared"))
    db.commit()
    gen.close()

    gen = database.get_db()
    db = next(gen)
    assert db.query(Video).count() == 1
    gen.close()


def test_close_db_resets_state():
    database.init_db("sqlite://")
    database.close_db()

    with pytest.raises(RuntimeError):
        database.get_engine()


def test_init_db_twice_replaces_engine():
    first = database.init_db("sqlite://")
    second = database.init_db("sqlite://")

    assert first is not second
    assert database.get_engine() is second
