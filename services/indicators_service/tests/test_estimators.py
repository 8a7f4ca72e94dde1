from datetime import datetime, timezone
from pathlib import Path
import random
import sys

ROOT = Path(__file__).resolve().parents[3]
SVC_DIR = ROOT / "services" / "indicators_service"
if str(SVC_DIR) not in sys.path:
    sys.path.insert(0, str(SVC_DIR))

from sources.estimators import OnsEstimator, PldEstimator, PLD_BASE_PRICES
from sources.ons import today_utc


def test_ear_estimate_stays_around_53_percent() -> None:
    estimator = OnsEstimator(rng=random.Random(7))

    values = [estimator.ear() for _ in range(200)]

    assert all(48.0 <= v <= 58.0 for v in values)


def test_carga_follows_evening_peak() -> None:
    rng = random.Random(42)
    peak = OnsEstimator(rng=rng, clock=lambda: datetime(2026, 10, 19, 19, 0))
    night = OnsEstimator(rng=rng, clock=lambda: datetime(2026, 10, 19, 3, 0))

    for _ in range(50):
        assert 75000.0 <= peak.carga() < 77000.0
        assert 60000.0 <= night.carga() < 62000.0


def test_geracao_exceeds_fallback_load_baseline() -> None:
    estimator = OnsEstimator(rng=random.Random(3), clock=lambda: datetime(2026, 10, 19, 10, 0))

    for _ in range(50):
        assert 60000.0 <= estimator.geracao() < 63000.0


def test_seeded_estimators_are_reproducible() -> None:
    a = OnsEstimator(rng=random.Random(123), clock=lambda: datetime(2026, 1, 1, 12, 0))
    b = OnsEstimator(rng=random.Random(123), clock=lambda: datetime(2026, 1, 1, 12, 0))

    assert [a.ear(), a.carga(), a.geracao()] == [b.ear(), b.carga(), b.geracao()]


def test_pld_estimate_is_bounded_and_rounded() -> None:
    estimator = PldEstimator(rng=random.Random(11))

    for region, base in PLD_BASE_PRICES.items():
        for _ in range(50):
            price = estimator.price(region)
            assert base - 20.0 <= price <= base + 20.0
            assert price == round(price, 2)


def test_pld_estimate_for_unknown_region_uses_default_base() -> None:
    price = PldEstimator(rng=random.Random(5)).price("centro-oeste")

    assert 160.0 <= price <= 200.0


def test_default_clock_is_utc_like_reference_date() -> None:
    now = OnsEstimator().clock()

    assert now.tzinfo == timezone.utc
    assert now.date() == today_utc()
