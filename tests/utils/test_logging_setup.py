import logging

from shipyard.logging.log import init_logging


def test_init_logging_writes_run_file_and_replaces_handlers(tmp_path):
    logger, run_id, log_path = init_logging(base_dir=tmp_path, name="shipyard-logtest")
    logger, run_id_2, log_path_2 = init_logging(base_dir=tmp_path, name="shipyard-logtest")
    try:
        assert len(logger.handlers) == 2
        assert run_id != run_id_2
        assert log_path_2.parent == tmp_path
        assert run_id_2 in log_path_2.name

        logger.debug("reconciling app web")
        for handler in logger.handlers:
            handler.flush()
        assert "reconciling app web" in log_path_2.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True


def test_console_level_follows_verbose(tmp_path):
    logger, _, _ = init_logging(base_dir=tmp_path, name="shipyard-logtest-verbose", verbose=True)
    try:
        console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
        assert [h.level for h in console] == [logging.DEBUG]
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
