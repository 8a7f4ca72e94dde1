# services/indicators_service/tariff.py

from datetime import date
from typing import Optional

from schemas import BandeiraTarifaria, TariffTier

# Названия месяцев на португальском (как в публикациях ANEEL)
MONTHS_PT = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

# Таблица уровней флага, проверяется сверху вниз, первое совпадение побеждает.
# Условие уровня: EAR > порога ИЛИ PLD < порога (любого индикатора достаточно).
# Ключи: уровень → (порог EAR, %; порог PLD, R$/MWh; надбавка, R$/100 kWh)
TARIFF_TABLE = (
    (TariffTier.VERDE, 60.0, 100.0, 0.0),
    (TariffTier.AMARELA, 40.0, 200.0, 1.88),
    (TariffTier.VERMELHA_1, 30.0, 300.0, 4.46),
)

# Уровень по умолчанию, если ни одно условие не выполнено
DEFAULT_TIER = (TariffTier.VERMELHA_2, 7.87)


def select_tier(ear: float, pld_medio: float) -> tuple[TariffTier, float]:
    """\
    Определяет уровень флага и надбавку по EAR и среднему PLD.

    Условия объединены через ИЛИ: высокий EAR даёт verde даже при
    экстремальном PLD, и наоборот.
    """
    for tier, ear_threshold, pld_threshold, valor in TARIFF_TABLE:
        if ear > ear_threshold or pld_medio < pld_threshold:
            return tier, valor
    return DEFAULT_TIER


def classify_tariff(
    ear: float,
    pld_medio: float,
    reference: Optional[date] = None,
) -> BandeiraTarifaria:
    """Тарифный флаг для текущего месяца (или для месяца reference)."""
    reference = reference or date.today()
    tier, valor = select_tier(ear, pld_medio)
    return BandeiraTarifaria(
        tipo=tier,
        valor=valor,
        mes=MONTHS_PT[reference.month - 1],
        ano=reference.year,
    )
