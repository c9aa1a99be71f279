import json
import logging
from datetime import date
from decimal import Decimal

from tms.core.logging import JsonFormatter, operation_logger


def _record(logger_name: str, msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(logger_name, logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_promotes_operation_and_nests_extras():
    record = _record("tms.bulk_upsert", "Bulk upsert completed", operation="bulk_upsert", request_id="r-1", inserted=3)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "tms.bulk_upsert"
    assert payload["message"] == "Bulk upsert completed"
    assert payload["operation"] == "bulk_upsert"
    assert payload["request_id"] == "r-1"
    assert payload["extra"] == {"inserted": 3}


def test_json_formatter_serializes_non_json_values():
    record = _record("tms", "x", entry_date=date(2025, 9, 1), hours=Decimal("1.50"))

    payload = json.loads(JsonFormatter().format(record))

    assert payload["extra"] == {"entry_date": "2025-09-01", "hours": "1.50"}


def test_operation_logger_binds_context(caplog):
    caplog.set_level(logging.INFO, logger="tms.submit_timesheet")

    log = operation_logger("tms.submit_timesheet", "submit_timesheet", request_id="r-9")
    log.bind(timesheet_id="ts-1").info("Timesheet approved", extra={"status": "APPROVED"})

    (record,) = [r for r in caplog.records if r.name == "tms.submit_timesheet"]
    assert record.operation == "submit_timesheet"
    assert record.request_id == "r-9"
    assert record.timesheet_id == "ts-1"
    assert record.status == "APPROVED"


def test_bind_does_not_mutate_parent():
    parent = operation_logger("tms.lock_timesheet", "lock_timesheet")
    child = parent.bind(timesheet_id="ts-2")

    assert "timesheet_id" not in parent.extra
    assert child.extra["timesheet_id"] == "ts-2"
    assert child.extra["operation"] == "lock_timesheet"
