"""\
Fallback-оценщики для индикаторов.

Когда внешний источник недоступен, коннектор не падает, а подставляет
правдоподобное псевдослучайное значение: страдает точность, но не доступность.
Оценщики внедряются в коннекторы, поэтому в тестах их можно заменить
детерминированными (seed-ованный random.Random или заглушка).
"""

import random
from datetime import datetime, timezone
from typing import Callable, Optional


# Базовые значения PLD по регионам, R$/MWh
PLD_BASE_PRICES = {
    "sudeste": 180.0,
    "sul": 175.0,
    "nordeste": 185.0,
    "norte": 190.0,
}
PLD_DEFAULT_BASE = 180.0
PLD_SPREAD = 20.0

# Параметры модели нагрузки, MW
CARGA_BASE = 65000.0
CARGA_PEAK_DELTA = 10000.0       # вечерний пик 18:00-21:59 UTC
CARGA_OFFPEAK_DELTA = -5000.0
CARGA_NOISE = 2000.0
GERACAO_SURPLUS = 1000.0

EAR_CENTER = 53.0
EAR_SPREAD = 5.0


def utcnow() -> datetime:
    """Единые часы сервиса: и профиль нагрузки, и data_referencia считаются в UTC."""
    return datetime.now(timezone.utc)


class OnsEstimator:
    """Оценки EAR / carga / geração на случай недоступности ONS."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.clock = clock or utcnow

    def ear(self) -> float:
        return EAR_CENTER + self.rng.uniform(-EAR_SPREAD, EAR_SPREAD)

    def carga(self) -> float:
        # Суточный профиль: вечером нагрузка выше базовой, в остальное время ниже
        hour = self.clock().hour
        variation = CARGA_PEAK_DELTA if 18 <= hour <= 21 else CARGA_OFFPEAK_DELTA
        return CARGA_BASE + variation + self.rng.random() * CARGA_NOISE

    def geracao(self) -> float:
        return self.carga() + self.rng.random() * GERACAO_SURPLUS


class PldEstimator:
    """Оценка PLD по региону: базовая цена ± 20 R$/MWh, не ниже нуля."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def price(self, region: str) -> float:
        base = PLD_BASE_PRICES.get(region, PLD_DEFAULT_BASE)
        variation = self.rng.uniform(-PLD_SPREAD, PLD_SPREAD)
        return round(max(0.0, base + variation), 2)
