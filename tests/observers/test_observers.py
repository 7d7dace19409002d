import json
import logging

import pytest

from shipyard.observers.dispatcher import EventBus
from shipyard.observers.events import ChartDeleted, PoolReserved, new_ctx
from shipyard.observers.jsonfile import JsonFileObserver
from shipyard.observers.logger import LoggerObserver


class Capture:
    def __init__(self): self.events = []
    def notify(self, event): self.events.append(event)


class Broken:
    def notify(self, event): raise RuntimeError("observer bug")


def test_bus_delivers_to_all_and_survives_broken_observer():
    cap = Capture()
    bus = EventBus([Broken(), cap])
    bus.emit(PoolReserved(pool="gold", **new_ctx(app="web")))
    assert len(cap.events) == 1
    assert cap.events[0].pool == "gold"
    assert cap.events[0].app == "web"


def test_json_file_observer_appends_lines(tmp_path):
    path = tmp_path / "events" / "out.jsonl"
    ob = JsonFileObserver(path)
    ctx = new_ctx(app="web")
    ob.notify(PoolReserved(pool="gold", **ctx))
    ob.notify(ChartDeleted(**ctx))

    lines = [json.loads(l) for l in path.read_text().splitlines()]
    assert [l["type"] for l in lines] == ["PoolReserved", "ChartDeleted"]
    assert lines[1]["error"] is None
    assert lines[0]["run_id"] == lines[1]["run_id"]


def test_logger_observer_formats_event(caplog):
    logger = logging.getLogger("shipyard-test-observer")
    ob = LoggerObserver(logger)
    with caplog.at_level(logging.INFO, logger="shipyard-test-observer"):
        ob.notify(PoolReserved(pool="gold", **new_ctx(app="web")))
    assert "[EVENT] PoolReserved:" in caplog.text
    assert "pool=gold" in caplog.text


def test_bus_rejects_objects_without_notify():
    with pytest.raises(TypeError):
        EventBus([object()])
