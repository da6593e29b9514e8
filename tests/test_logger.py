"""
Tests for the loguru setup
"""
from smartstudy.utils.logger import get_logger, logger


def test_records_carry_the_module_name():
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        get_logger("smartstudy.services.notes_service").info("listed notes")
        logger.info("unbound")
    finally:
        logger.remove(sink_id)

    assert [r["extra"]["name"] for r in records] == ["smartstudy.services.notes_service", "smartstudy"]
    assert records[0]["message"] == "listed notes"
