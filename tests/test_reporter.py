import logging
import threading
import time

import pytest

from ratmaze import (
    EventKind,
    LoggingReporter,
    MultiReporter,
    NullReporter,
    PacedReporter,
    RecordingReporter,
)
from ratmaze.reporter import color_name

logger = logging.getLogger(__name__)


@pytest.mark.unit
class TestReporters:

    def test_recording_keeps_order(self, recorder):
        recorder.on_visit(0, 0, 0)
        recorder.on_visit(1, 0, 3)
        recorder.on_final(1, 1)
        recorder.on_outcome(True)
        assert [e.kind for e in recorder.events] == [
            EventKind.VISIT, EventKind.VISIT, EventKind.FINAL, EventKind.OUTCOME,
        ]
        assert recorder.visits[1].cell == (1, 0)
        assert recorder.visits[1].color_tag == 3
        assert recorder.outcomes == [True]
        assert recorder.events[-1].cell is None

    def test_recording_is_thread_safe(self, recorder):
        def writer(tag):
            for i in range(500):
                recorder.on_visit(i, tag, tag)

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(8)]
        for t in threads: t.start()
        for t in threads: t.join()
        assert len(recorder.visits) == 8 * 500

    def test_null_reporter_accepts_everything(self):
        r = NullReporter()
        r.on_visit(0, 0, 1)
        r.on_final(0, 0)
        r.on_backtrack(0, 0)
        r.on_outcome(False)

    def test_paced_reporter_sleeps_after_cell_events(self, recorder):
        paced = PacedReporter(recorder, delay=0.05)
        began = time.monotonic()
        paced.on_visit(0, 0, 0)
        paced.on_final(0, 1)
        paced.on_outcome(True)
        assert time.monotonic() - began >= 0.1
        assert len(recorder.events) == 3

    def test_paced_reporter_rejects_negative_delay(self, recorder):
        with pytest.raises(ValueError):
            PacedReporter(recorder, delay=-1)

    def test_multi_reporter_fans_out(self):
        a, b = RecordingReporter(), RecordingReporter()
        multi = MultiReporter([a, b])
        multi.on_visit(2, 2, 1)
        multi.on_backtrack(2, 2)
        multi.on_outcome(False)
        assert len(a.events) == len(b.events) == 3
        assert b.backtracks[0].cell == (2, 2)

    def test_logging_reporter(self, caplog):
        reporter = LoggingReporter(level=logging.INFO)
        with caplog.at_level(logging.INFO, logger="ratmaze.reporter"):
            reporter.on_visit(1, 2, 6)
            reporter.on_outcome(False)
        assert "visit (1, 2) by magenta branch #6" in caplog.text
        assert "No Solution Exists!" in caplog.text

    def test_color_palette_cycles(self):
        assert color_name(0) == "cyan"
        assert color_name(4) == "orange"
        assert color_name(5) == "cyan"
