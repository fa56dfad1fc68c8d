"""
Shared fixtures: headless Qt, a recording canvas and a fake sounddevice module.
"""

import os
from contextlib import contextmanager

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from swarm_sketch.console import set_print_flags


class RecordingCanvas:
    """Canvas stand-in that records draw calls instead of painting"""

    def __init__(self, width=700, height=700):
        self.width = width
        self.height = height
        self.frame_count = 0
        self.line_color = None
        self.fill_color = None
        self.draw_shapes_with_fill = True
        self.draw_shapes_with_borders = True
        self.lines = []
        self.ellipses = []
        self.rectangles = []
        self.batches = 0
        self.in_batch = False
        self.unbatched_draws = 0

    @contextmanager
    def batch(self):
        if self.in_batch:
            yield self
            return
        self.batches += 1
        self.in_batch = True
        try:
            yield self
        finally:
            self.in_batch = False

    def _record_draw(self):
        if not self.in_batch:
            self.unbatched_draws += 1

    def draw_line(self, start, end):
        self._record_draw()
        self.lines.append((start, end, self.line_color))

    def draw_ellipse(self, at, width, height):
        self._record_draw()
        self.ellipses.append((at, width, height))

    def draw_rectangle(self, at, width, height):
        self._record_draw()
        self.rectangles.append((at, width, height, self.fill_color))

    def next_frame(self):
        self.frame_count += 1


class FakeStream:
    def __init__(self, callback=None, **kwargs):
        self.callback = callback
        self.kwargs = kwargs
        self.started = False
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def close(self):
        self.closed = True


class FakeSoundDevice:
    """Just enough of the sounddevice API for the microphone bridge"""

    def __init__(self, max_input_channels=1, samplerate=48000.0, query_fails=False, open_fails=False):
        self.max_input_channels = max_input_channels
        self.samplerate = samplerate
        self.query_fails = query_fails
        self.open_fails = open_fails
        self.streams = []
        self.open_attempts = 0

    def query_devices(self, kind=None):
        if self.query_fails:
            raise RuntimeError("Error querying device -1")
        return {
            'name': 'Fake Microphone',
            'max_input_channels': self.max_input_channels,
            'default_samplerate': self.samplerate,
        }

    def InputStream(self, **kwargs):
        self.open_attempts += 1
        if self.open_fails:
            raise RuntimeError("Error opening InputStream: Device unavailable")
        stream = FakeStream(**kwargs)
        self.streams.append(stream)
        return stream


@pytest.fixture(autouse=True)
def reset_print_flags():
    set_print_flags(False, False)
    yield
    set_print_flags(False, False)


@pytest.fixture(scope="session")
def qapp():
    from PyQt5.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def make_canvas():
    return RecordingCanvas


@pytest.fixture
def fake_sounddevice():
    return FakeSoundDevice


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the settings directory at a temporary home"""
    from pathlib import Path
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    return tmp_path
