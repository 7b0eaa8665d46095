import logging

import pytest

from formconvert.logging.logger import Log


class TestLog:
    def test_configure_sets_level_and_quiets_libraries(self) -> None:
        Log.configure("debug")

        assert logging.getLogger("formconvert").level == logging.DEBUG
        assert logging.getLogger("pdfminer").level == logging.WARNING

    def test_configure_does_not_stack_handlers(self) -> None:
        Log.configure("info")
        Log.configure("info")

        assert len(logging.getLogger("formconvert").handlers) == 1

    def test_messages_reach_formconvert_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="formconvert"):
            Log.info("Conversion c1 created")
            Log.warning("Skipping conversion c2")

        assert [r.levelname for r in caplog.records] == ["INFO", "WARNING"]
        assert caplog.records[0].getMessage() == "Conversion c1 created"

    def test_every_level_is_forwarded(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="formconvert"):
            Log.debug("prompt")
            Log.error("conversion failed")
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                Log.exception("step crashed")

        assert [r.levelname for r in caplog.records] == ["DEBUG", "ERROR", "ERROR"]
        assert caplog.records[2].exc_info is not None
