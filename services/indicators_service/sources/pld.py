# services/indicators_service/sources/pld.py

from typing import Optional

import httpx
from pydantic import BaseModel, Field

from schemas import PldData, PLD_REGIONS
from sources.estimators import PldEstimator
from sources.extraction import PriceExtractor, RegexPriceExtractor
from sources.ons import today_utc
from utils.logging import setup_logging

logger = setup_logging()


class PldSourceConfig(BaseModel):
    """Явная конфигурация коннектора PLD (страница панели цен CCEE)."""
    page_url: str
    user_agent: str = Field(description="User-Agent браузера, чтобы страницу не блокировали")
    timeout: float = Field(default=15.0, gt=0)

    @classmethod
    def from_settings(cls, settings) -> "PldSourceConfig":
        return cls(
            page_url=settings.PLD_PAGE_URL,
            user_agent=settings.PLD_USER_AGENT,
            timeout=settings.REQUEST_TIMEOUT,
        )


class PldSource:
    """
    Коннектор к панели цен CCEE (Câmara de Comercialização de Energia Elétrica).

    Страница скачивается одним запросом, цена каждого региона извлекается
    отдельно: если для региона совпадения нет, fallback применяется только к нему.
    При сетевой ошибке или сбое разбора fallback получают все четыре региона.
    fetch_all() никогда не бросает исключений наружу.
    """

    def __init__(
        self,
        config: PldSourceConfig,
        estimator: Optional[PldEstimator] = None,
        extractor: Optional[PriceExtractor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.estimator = estimator or PldEstimator()
        self.extractor = extractor or RegexPriceExtractor()
        self.transport = transport

    async def fetch_page(self) -> str:
        headers = {"User-Agent": self.config.user_agent}
        async with httpx.AsyncClient(
            timeout=self.config.timeout, transport=self.transport
        ) as client:
            resp = await client.get(self.config.page_url, headers=headers)
        resp.raise_for_status()
        return resp.text

    def extract_prices(self, page: str) -> dict[str, Optional[float]]:
        prices: dict[str, Optional[float]] = {}
        for region in PLD_REGIONS:
            value = self.extractor.extract(page, region)
            if value is not None and value < 0:
                value = None
            prices[region] = value
        return prices

    async def fetch_all(self) -> PldData:
        """Скачивает страницу, извлекает цены по регионам и собирает PldData."""
        prices: dict[str, Optional[float]] = {region: None for region in PLD_REGIONS}
        try:
            page = await self.fetch_page()
            prices = self.extract_prices(page)
        except httpx.TimeoutException as e:
            logger.warning(f"⏱️ CCEE page timed out after {self.config.timeout}s: {e}")
        except httpx.RequestError as e:
            logger.error(f"❌ HTTP error while fetching CCEE page: {e}")
        except httpx.HTTPStatusError as e:
            logger.warning(f"⚠️ CCEE returned HTTP {e.response.status_code}")
        except Exception as e:
            logger.error(f"❌ Failed to parse CCEE page: {e}")

        estimated = []
        for region in PLD_REGIONS:
            if prices[region] is None:
                prices[region] = self.estimator.price(region)
                estimated.append(region)

        if estimated:
            logger.warning(f"🎲 PLD: using fallback estimates for {estimated}")

        data = PldData(
            sudeste=prices["sudeste"],
            sul=prices["sul"],
            nordeste=prices["nordeste"],
            norte=prices["norte"],
            data_referencia=today_utc(),
            estimated_fields=estimated,
        )
        logger.debug(f"💰 PLD indicators: media={data.media:.2f} R$/MWh, estimated={estimated}")
        return data

    async def refresh(self) -> bool:
        """Принудительно перечитывает PLD. True — если обновление прошло без исключений."""
        try:
            await self.fetch_all()
            return True
        except Exception as e:
            logger.error(f"❌ Failed to refresh PLD: {e}")
            return False
