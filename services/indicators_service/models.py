# services/indicators_service/models.py

from datetime import datetime

from sqlalchemy import Integer, String, Text, DateTime, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from database import Base, INDICATORS_SCHEMA


# Допустимые статусы публикации новости
NEWS_STATUSES = ("rascunho", "publicada", "arquivada")


class NewsArticle(Base):
    """
    Новость сектора электроэнергетики (ANEEL, ONS, CCEE и т.д.).
    Сервис индикаторов с этими записями напрямую не работает:
    только housekeeping-шаг периодически удаляет устаревшие архивные записи.
    """
    __tablename__ = "noticias"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Информация об источнике
    fonte: Mapped[str] = mapped_column(String(50), nullable=False)
    url_original: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    data_publicacao: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Содержимое
    titulo: Mapped[str] = mapped_column(Text, nullable=False)
    resumo: Mapped[str | None] = mapped_column(Text, nullable=True)

    relevancia: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="rascunho")

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        CheckConstraint("relevancia >= 0 AND relevancia <= 100", name="ck_noticias_relevancia"),
        CheckConstraint(
            f"status IN ({', '.join(repr(s) for s in NEWS_STATUSES)})",
            name="ck_noticias_status",
        ),
        Index("ix_noticias_data_publicacao", "data_publicacao"),
        Index("ix_noticias_status", "status"),
        {"schema": INDICATORS_SCHEMA},
    )
