import io
import logging

import pytest

from rumb.utils.logger_config import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        yield root
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)


def test_console_stream_is_configurable(restore_root_logger, tmp_path) -> None:
    stream = io.StringIO()
    configure_logging("info", error_file=str(tmp_path / "errors.log"), stream=stream)

    logging.getLogger("rumb.services").info("created %s", "2025-01-01")

    assert "[INFO] rumb.services: created 2025-01-01" in stream.getvalue()
    assert not (tmp_path / "errors.log").exists()
