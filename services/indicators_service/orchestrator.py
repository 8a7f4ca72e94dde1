# services/indicators_service/orchestrator.py

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from schemas import (
    BandeiraStepResult,
    BandeiraTarifaria,
    CleanupStepResult,
    CurrentIndicators,
    IndicatorsUpdateResult,
    OnsStepResult,
    PldStepResult,
)
from sources.ons import OnsSource, OnsSourceConfig
from sources.pld import PldSource, PldSourceConfig
from tariff import classify_tariff
from utils.logging import setup_logging

logger = setup_logging()

INSUFFICIENT_DATA_ERROR = "insufficient data to classify tariff flag"

# Сообщения по умолчанию, если у исключения пустой текст
DEFAULT_ERRORS = {
    "ons": "Failed to fetch ONS data",
    "pld": "Failed to fetch PLD data",
    "bandeira": "Failed to classify tariff flag",
    "cleanup": "Failed to run cleanup",
}


def _error_message(step: str, exc: BaseException) -> str:
    return str(exc) or DEFAULT_ERRORS[step]


class IndicatorOrchestrator:
    """
    Последовательность обновления индикаторов:
      1. ONS (EAR / carga / geração),
      2. PLD по регионам,
      3. тарифный флаг по EAR и среднему PLD,
      4. housekeeping (чистка устаревших записей).

    run_update() устойчив: каждый шаг изолирован, ошибка шага попадает в отчёт
    и не прерывает остальные. get_current_indicators() — read-only запрос
    без изоляции: первая ошибка уходит вызывающему.
    """

    def __init__(
        self,
        ons_source,
        pld_source,
        housekeeping: Callable[[], int],
        classifier: Callable[..., BandeiraTarifaria] = classify_tariff,
    ) -> None:
        self.ons_source = ons_source
        self.pld_source = pld_source
        self.housekeeping = housekeeping
        self.classifier = classifier
        self._inflight: Optional[asyncio.Future] = None

    # ---------- Шаги с изоляцией ошибок ----------

    async def _ons_step(self) -> OnsStepResult:
        logger.info("🔌 Fetching ONS indicators...")
        try:
            data = await self.ons_source.fetch_all()
        except Exception as e:
            logger.error(f"❌ ONS step failed: {e}")
            return OnsStepResult(success=False, error=_error_message("ons", e))
        logger.info(f"✅ ONS step succeeded: ear={data.ear:.2f}%")
        return OnsStepResult(success=True, data=data)

    async def _pld_step(self) -> PldStepResult:
        logger.info("💰 Fetching PLD indicators...")
        try:
            data = await self.pld_source.fetch_all()
        except Exception as e:
            logger.error(f"❌ PLD step failed: {e}")
            return PldStepResult(success=False, error=_error_message("pld", e))
        logger.info(f"✅ PLD step succeeded: media={data.media:.2f} R$/MWh")
        return PldStepResult(success=True, data=data)

    def _bandeira_step(self, ons: OnsStepResult, pld: PldStepResult) -> BandeiraStepResult:
        logger.info("🚦 Classifying tariff flag...")
        if not (ons.success and ons.data and pld.success and pld.data):
            logger.warning(f"⚠️ Tariff flag skipped: {INSUFFICIENT_DATA_ERROR}")
            return BandeiraStepResult(success=False, error=INSUFFICIENT_DATA_ERROR)
        try:
            flag = self.classifier(ons.data.ear, pld.data.media)
        except Exception as e:
            logger.error(f"❌ Tariff flag step failed: {e}")
            return BandeiraStepResult(success=False, error=_error_message("bandeira", e))
        logger.info(f"✅ Tariff flag: {flag.tipo.value} (+R$ {flag.valor:.2f}/100 kWh)")
        return BandeiraStepResult(success=True, data=flag)

    async def _cleanup_step(self) -> CleanupStepResult:
        logger.info("🧹 Running housekeeping...")
        try:
            deleted = await asyncio.to_thread(self.housekeeping)
            result = CleanupStepResult(success=True, deleted_records=deleted)
        except Exception as e:
            logger.error(f"❌ Housekeeping step failed: {e}")
            return CleanupStepResult(success=False, error=_error_message("cleanup", e))
        logger.info(f"✅ Housekeeping succeeded: deleted_records={deleted}")
        return result

    # ---------- Публичные операции ----------

    async def _run_update(self, force: bool) -> IndicatorsUpdateResult:
        timestamp = datetime.now(timezone.utc)
        logger.info(f"🔄 Indicators update started (force={force})")

        try:
            # ONS и PLD не зависят друг от друга, опрашиваем параллельно
            ons, pld = await asyncio.gather(self._ons_step(), self._pld_step())
            bandeira = self._bandeira_step(ons, pld)
            cleanup = await self._cleanup_step()

            result = IndicatorsUpdateResult(
                timestamp=timestamp,
                ons=ons,
                pld=pld,
                bandeira=bandeira,
                cleanup=cleanup,
            )
        except Exception as e:
            logger.exception(f"❌ Indicators update failed: {e}")
            message = _error_message("cleanup", e)
            result = IndicatorsUpdateResult(
                timestamp=timestamp,
                ons=OnsStepResult(success=False, error="Update aborted"),
                pld=PldStepResult(success=False, error="Update aborted"),
                bandeira=BandeiraStepResult(success=False, error="Update aborted"),
                cleanup=CleanupStepResult(success=False, error=message),
            )

        logger.info(
            f"🏁 Indicators update finished: success={result.success}, "
            f"timestamp={result.timestamp.isoformat()}"
        )
        return result

    async def run_update(self, force: bool = False) -> IndicatorsUpdateResult:
        """
        Полное обновление индикаторов. Никогда не бросает исключений.

        Если предыдущий запуск ещё не завершился, новый вызов присоединяется
        к нему и получает тот же отчёт (одновременно идёт не больше одного запуска).
        """
        task = self._inflight
        if task is None or task.done():
            task = asyncio.ensure_future(self._run_update(force))
            self._inflight = task
        else:
            logger.warning("⏳ Indicators update already in progress, joining it")
        return await asyncio.shield(task)

    async def get_current_indicators(self) -> CurrentIndicators:
        """Текущие индикаторы без housekeeping. Любая ошибка пробрасывается наружу."""
        ons, pld = await asyncio.gather(
            self.ons_source.fetch_all(),
            self.pld_source.fetch_all(),
        )
        bandeira = self.classifier(ons.ear, pld.media)
        return CurrentIndicators(
            ons=ons,
            pld=pld,
            bandeira=bandeira,
            timestamp=datetime.now(timezone.utc),
        )


def build_orchestrator(settings, housekeeping: Callable[[], int]) -> IndicatorOrchestrator:
    """Собирает оркестратор с коннекторами, сконфигурированными из settings."""
    return IndicatorOrchestrator(
        ons_source=OnsSource(OnsSourceConfig.from_settings(settings)),
        pld_source=PldSource(PldSourceConfig.from_settings(settings)),
        housekeeping=housekeeping,
    )
