# services/indicators_service/housekeeping.py

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from config import settings
from database import SessionLocal
from models import NewsArticle
from utils.logging import setup_logging

logger = setup_logging()


def purge_stale_news(
    db: Session,
    retention_days: int,
    now: Optional[datetime] = None,
) -> int:
    """
    Удаляет архивные новости, которые не менялись дольше retention_days.
    Возвращает количество удалённых записей.
    """
    if retention_days < 0:
        raise ValueError("retention_days must be >= 0")

    cutoff = (now or datetime.utcnow()) - timedelta(days=retention_days)
    deleted = (
        db.query(NewsArticle)
        .filter(NewsArticle.status == "arquivada")
        .filter(NewsArticle.updated_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()

    logger.info(f"🧹 Purged {deleted} archived news records older than {cutoff:%Y-%m-%d}")
    return int(deleted)


def run_housekeeping() -> int:
    """Шаг housekeeping для оркестратора: своя сессия БД на каждый запуск."""
    db = SessionLocal()
    try:
        return purge_stale_news(db, settings.NEWS_RETENTION_DAYS)
    finally:
        db.close()
