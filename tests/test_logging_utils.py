import warnings
from pathlib import Path

from app.nexusdl import config, logging_utils, utils


def test_downloader_event_label_and_phase(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._downloader_event("state", phase="run", kind="start")

    assert events
    line = events[-1]
    assert line.startswith("[DOWNLOADER][STATE]")
    assert "phase='run'" in line
    assert "kind='start'" in line


def test_downloader_event_phase_only(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._downloader_event(phase="followup", attempt=3)

    assert events[-1] == "[DOWNLOADER][FOLLOWUP] attempt=3"


def test_downloader_event_never_raises(monkeypatch):
    def broken(_msg):
        raise RuntimeError("log sink down")

    monkeypatch.setattr(logging_utils, "log_line", broken)

    logging_utils._downloader_event("error", phase="run")


def test_log_line_writes_to_log_file():
    utils.log_line("[RUN] hello from the test")

    log_path = utils.get_current_log_path()
    assert log_path == config.LOG_FILE
    assert "[RUN] hello from the test" in Path(log_path).read_text(encoding="utf-8")


def test_torrent_filename_sanitises_title():
    assert utils.torrent_filename('A/B: "C"?', "1") == "A B C.torrent"
    assert utils.torrent_filename("  ...  ", "42") == "42.torrent"
    long_name = utils.torrent_filename("é" * 300, "1")
    assert long_name.endswith(".torrent")
    assert len(long_name.encode("utf-8")) <= 200


def test_setup_run_logger_rotates_to_timestamped_file():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        log_path = utils.setup_run_logger()

    assert log_path.parent == config.LOG_DIR
    assert log_path.name.startswith("run_") and log_path.suffix == ".log"
    assert utils.get_current_log_path() == log_path
