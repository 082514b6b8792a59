import json
import logging

from claimdesk.middleware.logging_config import JSONFormatter


def test_json_formatter_includes_extras():
    record = logging.LogRecord(
        "claimdesk.services.import_service", logging.INFO, __file__, 1,
        "Import %s completed", (3,), None,
    )
    record.upload_id = 3

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "Import 3 completed"
    assert entry["level"] == "INFO"
    assert entry["upload_id"] == 3
    assert entry["request_id"] == ""
