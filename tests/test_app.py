"""Command line parsing and the headless render path."""

import pytest
from PyQt5.QtGui import QCloseEvent, QImage

from swarm_sketch.app import SketchWindow, build_parser, main, validate_args
from swarm_sketch.audio import AudioFeatures
from swarm_sketch.canvas import Canvas
from swarm_sketch.render import render_frames
from swarm_sketch.settings import MICROPHONE_ACCESS_KEY, load_settings, save_settings
from swarm_sketch.sketch import Sketch


def parse(argv, defaults=None):
    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    validate_args(parser, args)
    return args


class TestArguments:

    def test_defaults(self):
        args = parse([])
        assert args.fps == 60
        assert args.agents == 50
        assert args.seed is None
        assert not args.no_audio
        assert args.frames is None

    @pytest.mark.parametrize("argv", [
        ['--fps', '0'],
        ['--fps', '500'],
        ['--agents', '0'],
        ['--block-size', '16'],
        ['--frames', '10'],
        ['--frames', '0', '--output', 'x.png'],
        ['--output', 'x.png'],
        ['--audio-file', 'song.wav'],
    ])
    def test_invalid(self, argv):
        with pytest.raises(SystemExit):
            parse(argv)

    def test_settings_become_defaults(self):
        args = parse([], defaults={'agents': 12, 'no_audio': True})
        assert args.agents == 12
        assert args.no_audio

    def test_command_line_beats_settings(self):
        args = parse(['--agents', '20'], defaults={'agents': 12})
        assert args.agents == 20


class TestHeadless:

    def test_render_frames(self, qapp, tmp_path):
        out = tmp_path / "swarm.png"
        lines = render_frames(out, 5, agent_count=10, seed=4)
        assert lines > 0
        image = QImage(str(out))
        assert (image.width(), image.height()) == (700, 700)

    def test_render_with_audio_file(self, qapp, tmp_path):
        import numpy as np
        from scipy.io import wavfile

        wav = tmp_path / "tone.wav"
        t = np.arange(48000) / 48000
        wavfile.write(str(wav), 48000, (0.4 * np.sin(2 * np.pi * 880 * t) * 32767).astype(np.int16))

        out = tmp_path / "swarm.png"
        assert render_frames(out, 3, agent_count=5, seed=1, audio_file=wav) > 0
        assert out.exists()

    def test_unwritable_output(self, qapp, tmp_path):
        with pytest.raises(RuntimeError):
            render_frames(tmp_path / "missing" / "dir" / "swarm.png", 1, agent_count=2, seed=1)

    def test_main_renders_and_saves_settings(self, qapp, config_home, tmp_path):
        out = tmp_path / "main.png"
        code = main(['--frames', '2', '--output', str(out), '--agents', '8', '--seed', '3',
                     '--save-settings', '--silent'])
        assert code == 0
        assert out.exists()
        settings = load_settings()
        assert settings['agents'] == 8
        assert settings['seed'] == 3

    def test_main_uses_stored_defaults(self, qapp, config_home, tmp_path, capsys):
        save_settings({'agents': 3, 'seed': 9})
        out = tmp_path / "stored.png"
        assert main(['--frames', '1', '--output', str(out)]) == 0
        assert "Rendering 1 frames" in capsys.readouterr().out

    def test_reset_microphone_forgets_decision(self, qapp, config_home, tmp_path):
        save_settings({MICROPHONE_ACCESS_KEY: "denied", "agents": 3})
        out = tmp_path / "reset.png"
        assert main(["--reset-microphone", "--frames", "1", "--output", str(out), "--silent"]) == 0
        settings = load_settings()
        assert MICROPHONE_ACCESS_KEY not in settings
        assert settings["agents"] == 3


class TestWindow:

    def test_advance_frame_draws_and_counts(self, qapp):
        canvas = Canvas()
        sketch = Sketch(canvas, audio=AudioFeatures(), agent_count=6, seed=2)
        window = SketchWindow(sketch, fps=1)
        try:
            window.advance_frame()
            window.advance_frame()
            assert canvas.frame_count == 2
        finally:
            window.closeEvent(QCloseEvent())
        assert not window.running
