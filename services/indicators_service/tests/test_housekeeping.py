from datetime import datetime, timedelta
from pathlib import Path
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[3]
SVC_DIR = ROOT / "services" / "indicators_service"
if str(SVC_DIR) not in sys.path:
    sys.path.insert(0, str(SVC_DIR))

import housekeeping
from database import Base, INDICATORS_SCHEMA
from models import NewsArticle


NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def session_factory():
    # SQLite не знает схем PostgreSQL, переводим схему indicators в схему по умолчанию
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        execution_options={"schema_translate_map": {INDICATORS_SCHEMA: None}},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    engine.dispose()


def add_article(db, slug: str, status: str, age_days: int) -> None:
    stamp = NOW - timedelta(days=age_days)
    db.add(
        NewsArticle(
            fonte="ANEEL",
            url_original=f"https://aneel.test/{slug}",
            data_publicacao=stamp,
            titulo=f"Notícia {slug}",
            status=status,
            relevancia=50,
            created_at=stamp,
            updated_at=stamp,
        )
    )


def seed(db) -> None:
    add_article(db, "old-archived", "arquivada", 200)
    add_article(db, "recent-archived", "arquivada", 10)
    add_article(db, "old-published", "publicada", 400)
    add_article(db, "old-draft", "rascunho", 400)
    db.commit()


def test_purge_removes_only_stale_archived_news(session_factory) -> None:
    db = session_factory()
    seed(db)

    deleted = housekeeping.purge_stale_news(db, retention_days=90, now=NOW)

    assert deleted == 1
    remaining = {a.url_original.rsplit("/", 1)[1] for a in db.query(NewsArticle).all()}
    assert remaining == {"recent-archived", "old-published", "old-draft"}
    db.close()


def test_purge_is_idempotent(session_factory) -> None:
    db = session_factory()
    seed(db)

    assert housekeeping.purge_stale_news(db, retention_days=90, now=NOW) == 1
    assert housekeeping.purge_stale_news(db, retention_days=90, now=NOW) == 0
    db.close()


def test_purge_rejects_negative_retention(session_factory) -> None:
    db = session_factory()

    with pytest.raises(ValueError):
        housekeeping.purge_stale_news(db, retention_days=-1, now=NOW)
    db.close()


def test_run_housekeeping_uses_own_session(session_factory, monkeypatch) -> None:
    db = session_factory()
    add_article(db, "ancient", "arquivada", 3650)
    db.commit()
    db.close()

    monkeypatch.setattr(housekeeping, "SessionLocal", session_factory)

    assert housekeeping.run_housekeeping() == 1
