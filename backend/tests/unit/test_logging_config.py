import json
import logging

import pytest

from clinica.core.logging_config import ConsoleFormatter, JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(**extra):
    record = logging.LogRecord(
        name="clinica.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Purchase recorded",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestFormatters:
    def test_json_formatter_carries_context(self):
        payload = json.loads(JSONFormatter().format(_record(context={"purchase_id": 3})))

        assert payload["message"] == "Purchase recorded"
        assert payload["level"] == "INFO"
        assert payload["context"] == {"purchase_id": 3}

    def test_console_formatter_appends_context_without_touching_record(self):
        record = _record(context={"user_id": 1})

        line = ConsoleFormatter("%(levelname)s %(message)s").format(record)

        assert line.endswith('| {"user_id": 1}')
        assert record.levelname == "INFO"


@pytest.mark.unit
class TestSetupLogging:
    def test_file_handlers_are_created(self, tmp_path, restore_root_logger):
        setup_logging(log_level="DEBUG", log_to_file=True, log_dir=tmp_path)

        logging.getLogger("clinica.test").error("boom", extra={"context": {"step": 1}})
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert (tmp_path / "clinica.log").exists()
        errors = (tmp_path / "clinica_errors.log").read_text(encoding="utf-8").splitlines()
        assert json.loads(errors[-1])["context"] == {"step": 1}
        assert restore_root_logger.level == logging.DEBUG
