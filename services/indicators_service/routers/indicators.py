# services/indicators_service/routers/indicators.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from config import settings
from housekeeping import run_housekeeping
from orchestrator import IndicatorOrchestrator, build_orchestrator
from schemas import CurrentIndicators, IndicatorsUpdateResult, UpdateRequest
from utils.logging import setup_logging

logger = setup_logging()

router = APIRouter(prefix="/api/v1/indicators", tags=["indicators"])

# Один оркестратор на процесс: на нём держится защита от параллельных запусков
_orchestrator: Optional[IndicatorOrchestrator] = None


def get_orchestrator() -> IndicatorOrchestrator:
    """Зависимость FastAPI: общий экземпляр оркестратора."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(settings, housekeeping=run_housekeeping)
    return _orchestrator


# ---------- Эндпойнты ----------

@router.post("/update", response_model=IndicatorsUpdateResult)
async def update_indicators(
    body: Optional[UpdateRequest] = None,
    orchestrator: IndicatorOrchestrator = Depends(get_orchestrator),
):
    """
    Обновляет все индикаторы (вызывается внешним планировщиком).
    Всегда отвечает 200: частичные сбои описаны в самом отчёте.
    """
    body = body or UpdateRequest()
    return await orchestrator.run_update(force=body.force)


@router.get("/current", response_model=CurrentIndicators)
async def get_current_indicators(
    orchestrator: IndicatorOrchestrator = Depends(get_orchestrator),
):
    """
    Возвращает текущие индикаторы и флаг без housekeeping.
    Запрос «всё или ничего»: любая ошибка превращается в 502.
    """
    try:
        return await orchestrator.get_current_indicators()
    except Exception as e:
        logger.error(f"❌ Failed to build current indicators: {e}")
        raise HTTPException(status_code=502, detail=f"Indicators unavailable: {e}")
