import os

from reportcard.core.logger import LOG_DIR, logger


def read_log(level):
    path = os.path.join(LOG_DIR, f"{level}.log")
    if not os.path.exists(path):
        return ""
    with open(path, encoding="utf-8") as f:
        return f.read()


def test_levels_are_split_by_file():
    logger.warning("[LOG TEST] marks batch rejected")
    logger.success("[LOG TEST] report card issued")
    logger.critical("[LOG TEST] database unavailable")
    logger.complete()

    assert "marks batch rejected" in read_log("warning")
    assert "marks batch rejected" not in read_log("info")
    assert "report card issued" in read_log("info")
    assert "database unavailable" in read_log("error")
