# services/indicators_service/sources/ons.py

import asyncio
import math
from datetime import date
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from schemas import OnsData, ONS_METRICS
from sources.estimators import OnsEstimator, utcnow
from utils.logging import setup_logging

logger = setup_logging()

# Поля записи datastore, в которых ONS отдаёт значение метрики (в порядке приоритета)
VALUE_FIELDS = {
    "ear": ("val_enerarmaz", "ear"),
    "carga": ("val_carga", "carga"),
    "geracao": ("val_geracao", "geracao"),
}

SORT_FIELD = "din_instante"


class OnsSourceConfig(BaseModel):
    """Явная конфигурация коннектора ONS (вместо чтения окружения внутри коннектора)."""
    base_url: str = Field(description="Базовый URL CKAN action API")
    resource_ids: dict[str, str] = Field(description="metric -> resource_id датасета")
    timeout: float = Field(default=15.0, gt=0, description="Таймаут запроса, сек")

    @classmethod
    def from_settings(cls, settings) -> "OnsSourceConfig":
        return cls(
            base_url=settings.ONS_API_URL,
            resource_ids={
                "ear": settings.ONS_EAR_RESOURCE_ID,
                "carga": settings.ONS_CARGA_RESOURCE_ID,
                "geracao": settings.ONS_GERACAO_RESOURCE_ID,
            },
            timeout=settings.REQUEST_TIMEOUT,
        )


def parse_metric_value(payload: Any, metric: str) -> Optional[float]:
    """
    Достаёт значение метрики из ответа datastore_search:
    {"success": true, "result": {"records": [{...}]}}.
    Возвращает None, если ответ неуспешный, пустой или значение неправдоподобно.
    """
    if not isinstance(payload, dict) or payload.get("success") is not True:
        return None

    result = payload.get("result")
    records = result.get("records") if isinstance(result, dict) else None
    if not isinstance(records, list) or not records:
        return None

    record = records[0]
    if not isinstance(record, dict):
        return None

    for field in VALUE_FIELDS[metric]:
        raw = record.get(field)
        if raw is None or raw == "":
            continue
        try:
            value = float(str(raw).replace(",", "."))
        except ValueError:
            continue

        if not math.isfinite(value) or value < 0:
            continue
        # EAR — процент от ёмкости, больше 100 быть не может
        if metric == "ear" and value > 100:
            continue
        return value

    return None


def today_utc() -> date:
    return utcnow().date()


class OnsSource:
    """
    Коннектор к открытым данным ONS (Operador Nacional do Sistema Elétrico).

    Три метрики запрашиваются параллельно и независимо; ошибка любой из них
    поглощается внутри коннектора и заменяется fallback-оценкой.
    fetch_all() никогда не бросает исключений наружу.
    """

    def __init__(
        self,
        config: OnsSourceConfig,
        estimator: Optional[OnsEstimator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.estimator = estimator or OnsEstimator()
        self.transport = transport

    async def fetch_metric(self, metric: str) -> Optional[float]:
        """Один запрос к datastore_search. None — значение получить не удалось."""
        url = self.config.base_url.rstrip("/") + "/datastore_search"
        params = {
            "resource_id": self.config.resource_ids[metric],
            "limit": 1,
            "sort": f"{SORT_FIELD} desc",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self.transport
            ) as client:
                resp = await client.get(url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.TimeoutException as e:
            logger.warning(f"⏱️ ONS {metric}: request timed out after {self.config.timeout}s: {e}")
            return None
        except httpx.RequestError as e:
            logger.error(f"❌ HTTP error while fetching ONS {metric}: {e}")
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(f"⚠️ ONS returned HTTP {e.response.status_code} for {metric}")
            return None
        except Exception as e:
            logger.error(f"❌ Unexpected error while fetching ONS {metric}: {e}")
            return None

        value = parse_metric_value(payload, metric)
        if value is None:
            logger.warning(f"⚠️ ONS {metric}: response has no usable record")
        return value

    async def _resolve(self, metric: str) -> tuple[float, bool]:
        value = await self.fetch_metric(metric)
        if value is not None:
            return value, False

        estimate = getattr(self.estimator, metric)()
        logger.warning(f"🎲 ONS {metric}: using fallback estimate {estimate:.2f}")
        return estimate, True

    async def fetch_all(self) -> OnsData:
        """Параллельно опрашивает EAR, carga и geração и собирает OnsData."""
        resolved = await asyncio.gather(*(self._resolve(m) for m in ONS_METRICS))
        values = dict(zip(ONS_METRICS, resolved))

        data = OnsData(
            ear=values["ear"][0],
            carga=values["carga"][0],
            geracao=values["geracao"][0],
            data_referencia=today_utc(),
            estimated_fields=[m for m in ONS_METRICS if values[m][1]],
        )
        logger.debug(
            f"🔍 ONS indicators: ear={data.ear:.2f}%, carga={data.carga:.0f} MW, "
            f"geracao={data.geracao:.0f} MW, estimated={data.estimated_fields}"
        )
        return data
