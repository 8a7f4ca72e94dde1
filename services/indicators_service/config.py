import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Конфигурация indicators_service, сборщика индикаторов электроэнергетики
    (ONS: EAR / carga / geração, CCEE: PLD по регионам) и тарифного флага.
    Загружается из переменных окружения (.env) или docker-compose.
    """

    # --- Общая информация ---
    SERVICE_NAME: str = "Indicators Service"
    VERSION: str = "1.0.0"
    ENV: str = os.getenv("ENV", "dev")

    # --- Подключение к БД (хранилище новостей, чистится housekeeping-шагом) ---
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://postgres:postgres@db:5432/indicators"
    )

    # --- ONS (открытые данные, CKAN datastore API) ---
    ONS_API_URL: str = os.getenv(
        "ONS_API_URL",
        "https://dados.ons.org.br/api/3/action"
    )
    ONS_EAR_RESOURCE_ID: str = "b1bd71e7-d0ad-4214-9053-cbd58e9564a7"
    ONS_CARGA_RESOURCE_ID: str = "0b5f9792-3c1f-4d87-9f1d-e5e4c5e5e5e5"
    ONS_GERACAO_RESOURCE_ID: str = "c1d2e3f4-5a6b-7c8d-9e0f-1a2b3c4d5e6f"

    # --- CCEE (страница с панелью цен PLD) ---
    PLD_PAGE_URL: str = os.getenv(
        "PLD_PAGE_URL",
        "https://www.ccee.org.br/web/guest/precos/painel-precos"
    )
    PLD_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )

    # --- Поведение сервиса ---
    REQUEST_TIMEOUT: float = 15.0     # таймаут каждого внешнего запроса (сек)
    NEWS_RETENTION_DAYS: int = 90     # архивные новости старше N дней удаляются

    # --- Логирование ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Единый экземпляр конфигурации для импорта
settings = Settings()
