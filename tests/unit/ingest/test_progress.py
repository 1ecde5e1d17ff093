"""Unit tests for progress reporters."""

from __future__ import annotations

from ingest.progress import LoggingProgressReporter, StageChange


class _FakeLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def info(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))


def test_logging_reporter_throttles_parse_updates(monkeypatch) -> None:
    """Parse updates are logged once per whole percent."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("ingest.progress._LOGGER", fake_logger)
    reporter = LoggingProgressReporter()

    reporter.stage_changed(StageChange(stage="parsing", year=2017, total_records=1000, worker_count=4))
    for processed in (1, 2, 5, 10, 10, 1000):
        reporter.parsing_progress(processed, 1000)

    parse_events = [fields for event, fields in fake_logger.events if event == "import_parsing_progress"]
    assert [fields["percent"] for fields in parse_events] == [0, 1, 100]


def test_logging_reporter_logs_stage_details(monkeypatch) -> None:
    """Stage events carry the details known at entry."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("ingest.progress._LOGGER", fake_logger)
    reporter = LoggingProgressReporter()

    reporter.stage_changed(StageChange(stage="importing", year=2017, total_batches=3))

    assert fake_logger.events == [
        ("import_stage_changed", {"stage": "importing", "year": 2017, "total_batches": 3})
    ]
