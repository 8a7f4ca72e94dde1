# services/indicators_service/main.py

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from utils.logging import setup_logging
from database import engine, ensure_schema
from models import Base
from config import settings
from routers import indicators as indicators_router

logger = setup_logging()

app = FastAPI(
    title=settings.SERVICE_NAME,
    version=settings.VERSION,
    description=(
        "Indicators Service — сбор индикаторов электроэнергетики (ONS, PLD) "
        "и расчёт тарифного флага"
    ),
)

# Метрики Prometheus доступны на /metrics
Instrumentator().instrument(app).expose(app, include_in_schema=False)


@app.on_event("startup")
def startup_event():
    """Создание схемы и таблиц при запуске"""
    ensure_schema()
    Base.metadata.create_all(bind=engine)
    logger.info("⚡ indicators_service started and schema ensured.")


@app.get("/health", tags=["system"])
async def health():
    return {"status": "ok", "service": "indicators_service"}


@app.get("/ready", tags=["system"])
async def ready():
    return {"status": "ready"}


@app.get("/", include_in_schema=False)
async def root():
    return {"message": "Indicators Service is operational"}


app.include_router(indicators_router.router)
