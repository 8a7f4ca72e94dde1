from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[3]
SVC_DIR = ROOT / "services" / "indicators_service"
if str(SVC_DIR) not in sys.path:
    sys.path.insert(0, str(SVC_DIR))

from loguru import logger as loguru_logger

from utils.logging import setup_logging


def test_setup_logging_returns_shared_loguru_logger() -> None:
    log = setup_logging()
    messages: list[str] = []
    sink_id = log.add(lambda message: messages.append(message.record["message"]), level="INFO")

    try:
        log.info("indicators ready")
    finally:
        log.remove(sink_id)

    assert log is loguru_logger
    assert messages == ["indicators ready"]
