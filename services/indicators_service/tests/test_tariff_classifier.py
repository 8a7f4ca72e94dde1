from datetime import date
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[3]
SVC_DIR = ROOT / "services" / "indicators_service"
if str(SVC_DIR) not in sys.path:
    sys.path.insert(0, str(SVC_DIR))

from schemas import TariffTier
from tariff import MONTHS_PT, classify_tariff


REFERENCE = date(2026, 10, 19)


@pytest.mark.parametrize(
    "ear, pld_medio, tier, valor",
    [
        (65, 350, TariffTier.VERDE, 0.0),        # высокий EAR перекрывает экстремальный PLD
        (10, 50, TariffTier.VERDE, 0.0),         # низкий PLD перекрывает низкий EAR
        (45, 350, TariffTier.AMARELA, 1.88),
        (10, 150, TariffTier.AMARELA, 1.88),
        (35, 250, TariffTier.VERMELHA_1, 4.46),
        (5, 400, TariffTier.VERMELHA_2, 7.87),
    ],
)
def test_classify_first_match_with_or_conditions(ear, pld_medio, tier, valor) -> None:
    flag = classify_tariff(ear, pld_medio, reference=REFERENCE)

    assert flag.tipo == tier
    assert flag.valor == valor


def test_thresholds_are_strict() -> None:
    # EAR=60 и PLD=100 не проходят verde, но проходят amarela
    assert classify_tariff(60, 100, reference=REFERENCE).tipo == TariffTier.AMARELA
    # EAR=30 и PLD=300 не проходят ни один порог
    assert classify_tariff(30, 300, reference=REFERENCE).tipo == TariffTier.VERMELHA_2


def test_classify_is_total_over_input_grid() -> None:
    ears = [0, 15, 30, 30.01, 40, 50, 60, 60.01, 100, float("nan")]
    prices = [0, 99.99, 100, 150, 200, 299.99, 300, 1000, float("nan")]

    for ear in ears:
        for pld_medio in prices:
            flag = classify_tariff(ear, pld_medio, reference=REFERENCE)
            assert flag.tipo in set(TariffTier)
            assert flag.valor >= 0


def test_reference_month_in_portuguese() -> None:
    flag = classify_tariff(70, 50, reference=REFERENCE)

    assert flag.mes == "outubro"
    assert flag.ano == 2026


def test_reference_defaults_to_today() -> None:
    today = date.today()
    flag = classify_tariff(70, 50)

    assert flag.mes == MONTHS_PT[today.month - 1]
    assert flag.ano == today.year


def test_tiers_are_ordered_by_severity() -> None:
    assert TariffTier.VERDE < TariffTier.AMARELA < TariffTier.VERMELHA_1 < TariffTier.VERMELHA_2
    assert sorted(
        [TariffTier.VERMELHA_2, TariffTier.VERDE, TariffTier.VERMELHA_1, TariffTier.AMARELA]
    ) == list(TariffTier)
    assert TariffTier.VERMELHA_2.severity == 3
