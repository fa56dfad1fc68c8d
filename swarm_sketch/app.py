#!/usr/bin/env python3
"""
Swarm Sketch window and command line
Shows the sketch canvas in a window and drives draw() at a fixed frame rate.
The microphone (when available) colours the lines by pitch and loudness.
"""

import argparse
import sys
import threading
import time
from datetime import datetime

from PyQt5.QtCore import QRect, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QPainter
from PyQt5.QtWidgets import QApplication, QMainWindow, QWidget

from .audio import MicrophoneFeatures
from .canvas import Canvas
from .console import print, set_print_flags
from .render import render_frames
from .settings import (MICROPHONE_ACCESS_KEY, PERSISTED_OPTIONS, forget_microphone_access, get_config_dir,
                       load_settings, remember_microphone_access, update_settings)
from .sketch import Sketch

CANVAS_SIZE = 700


class SketchView(QWidget):
    """Paints the canvas image, scaled to fit and centred"""

    def __init__(self, canvas, parent=None):
        super().__init__(parent)
        self.canvas = canvas
        self.setMinimumSize(200, 200)

    def target_rect(self):
        scale = min(self.width() / self.canvas.width, self.height() / self.canvas.height)
        w = int(self.canvas.width * scale)
        h = int(self.canvas.height * scale)
        return QRect((self.width() - w) // 2, (self.height() - h) // 2, w, h)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        painter.fillRect(self.rect(), QColor(20, 20, 30))
        painter.drawImage(self.target_rect(), self.canvas.image)
        painter.end()


class SketchWindow(QMainWindow):
    # Signal for thread-safe frame updates
    update_signal = pyqtSignal()

    def __init__(self, sketch, fps=60):
        super().__init__()
        self.setWindowTitle("Swarm Sketch")
        self.sketch = sketch
        self.canvas = sketch.canvas
        self.fps = fps

        # Fullscreen state tracking
        self.is_fullscreen = False
        self.normal_geometry = None

        self.view = SketchView(self.canvas, self)
        self.setCentralWidget(self.view)
        self.resize(self.canvas.width, self.canvas.height)

        # Performance monitoring
        self.frame_times = []
        self.lines_drawn = 0
        self.fps_report_interval = 2.0
        self.last_fps_report = time.perf_counter()

        self.update_signal.connect(self.advance_frame)

        # Frame thread emits the signal; draw() itself runs on the GUI thread
        self.timer_interval = 1.0 / self.fps
        self.running = True
        self.frame_thread = threading.Thread(target=self._frame_loop, daemon=True)
        self.frame_thread.start()

    def _frame_loop(self):
        """Thread loop that requests a frame at precise intervals"""
        next_frame_time = time.perf_counter()

        while self.running:
            sleep_time = next_frame_time - time.perf_counter()
            if sleep_time > 0:
                time.sleep(sleep_time)

            self.update_signal.emit()
            next_frame_time += self.timer_interval

    def advance_frame(self):
        if not self.running:
            return
        frame_start = time.perf_counter()

        self.lines_drawn += self.sketch.draw()
        self.canvas.next_frame()
        self.view.update()

        frame_end = time.perf_counter()
        self.frame_times.append(frame_end - frame_start)

        if frame_end - self.last_fps_report >= self.fps_report_interval:
            if self.frame_times:
                avg_frame_time = sum(self.frame_times) / len(self.frame_times)
                actual_fps = len(self.frame_times) / self.fps_report_interval
                lines_per_frame = self.lines_drawn / len(self.frame_times)
                print(f"Performance: {actual_fps:.1f} FPS | Frame time: avg={avg_frame_time * 1000:.2f}ms "
                      f"| Lines/frame: {lines_per_frame:.1f} | Frame {self.canvas.frame_count}",
                      debug_only=True)
                self.frame_times.clear()
                self.lines_drawn = 0
            self.last_fps_report = frame_end

    def save_snapshot(self):
        path = get_config_dir() / f"snapshot-{datetime.now():%Y%m%d-%H%M%S}.png"
        if self.canvas.save(path):
            print(f"✓ Saved snapshot: {path}")
        else:
            print(f"Error: Could not save snapshot to {path}", file=sys.stderr)

    def toggle_fullscreen(self):
        """Toggle fullscreen mode"""
        if not self.is_fullscreen:
            self.normal_geometry = self.geometry()
            self.showFullScreen()
            self.is_fullscreen = True
        else:
            self.showNormal()
            if self.normal_geometry:
                self.setGeometry(self.normal_geometry)
            self.is_fullscreen = False

    def keyPressEvent(self, event):
        """Handle keyboard events"""
        # F11 or F to toggle fullscreen
        if event.key() in (Qt.Key_F11, Qt.Key_F):
            self.toggle_fullscreen()
        # Escape to exit fullscreen
        elif event.key() == Qt.Key_Escape and self.is_fullscreen:
            self.toggle_fullscreen()
        # S to save the canvas
        elif event.key() == Qt.Key_S:
            self.save_snapshot()
        # Q to quit
        elif event.key() == Qt.Key_Q:
            self.close()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        """Clean up when closing the application"""
        self.running = False
        if self.frame_thread.is_alive():
            self.frame_thread.join(timeout=1)
        self.sketch.audio.stop()
        event.accept()


def build_parser(defaults=None):
    parser = argparse.ArgumentParser(
        description='Audio-reactive swarm sketch',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s                                   # Run with the microphone
  %(prog)s --no-audio --agents 80            # Hue cycle only, bigger swarm
  %(prog)s --frames 600 --output swarm.png   # Render headless to an image
  %(prog)s --frames 600 --output swarm.png --audio-file song.wav
        '''
    )

    parser.add_argument('--fps', type=int, default=60, metavar='HZ',
                        help='Frame rate in Hz (default: 60).')

    parser.add_argument('--agents', type=int, default=50, metavar='COUNT',
                        help='Number of agents in the swarm (default: 50).')

    parser.add_argument('--seed', type=int, default=None, metavar='SEED',
                        help='Random seed for the swarm and hue timer (default: random).')

    parser.add_argument('--no-audio', action='store_true',
                        help='Do not use the microphone; colours follow the hue timer only.')

    parser.add_argument('--block-size', type=int, default=1024, metavar='SAMPLES',
                        help='Microphone block size in samples (default: 1024).')

    parser.add_argument('--draw-boundaries', action='store_true',
                        help='Outline every agent each frame.')

    parser.add_argument('--clear', action='store_true',
                        help='Clear the canvas every frame instead of letting lines accumulate.')

    parser.add_argument('--frames', type=int, default=None, metavar='COUNT',
                        help='Render this many frames headless and exit (requires --output).')

    parser.add_argument('--output', type=str, default=None, metavar='PATH',
                        help='PNG file written by --frames.')

    parser.add_argument('--audio-file', type=str, default=None, metavar='WAV',
                        help='Drive the colours from a WAV file (only with --frames).')

    parser.add_argument('--save-settings', action='store_true',
                        help='Remember these options as the new defaults.')

    parser.add_argument('--reset-microphone', action='store_true',
                        help='Forget the stored microphone decision and check the device again.')

    parser.add_argument('--silent', action='store_true',
                        help='Suppress all output except errors.')

    parser.add_argument('--debug', action='store_true',
                        help='Enable debug output (performance stats, hue timer, notes).')

    if defaults:
        parser.set_defaults(**defaults)
    return parser


def validate_args(parser, args):
    if args.fps < 1 or args.fps > 240:
        parser.error('--fps must be between 1 and 240 Hz')
    if args.agents < 1 or args.agents > 1000:
        parser.error('--agents must be between 1 and 1000')
    if args.block_size < 64 or args.block_size > 16384:
        parser.error('--block-size must be between 64 and 16384')
    if args.frames is not None:
        if args.frames < 1:
            parser.error('--frames must be at least 1')
        if not args.output:
            parser.error('--frames requires --output')
    elif args.output or args.audio_file:
        parser.error('--output and --audio-file require --frames')


def main(argv=None):
    settings = load_settings()
    defaults = {key: settings[key] for key in PERSISTED_OPTIONS if key in settings}

    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    validate_args(parser, args)
    set_print_flags(args.silent, args.debug)

    if args.reset_microphone:
        settings = forget_microphone_access()
        print("✓ Microphone decision cleared")

    if args.save_settings:
        update_settings(**{key: getattr(args, key) for key in PERSISTED_OPTIONS})
        print("✓ Settings saved")

    if args.frames is not None:
        render_frames(
            args.output,
            args.frames,
            width=CANVAS_SIZE,
            height=CANVAS_SIZE,
            agent_count=args.agents,
            seed=args.seed,
            audio_file=args.audio_file,
            fps=args.fps,
            draw_boundaries=args.draw_boundaries,
            clear_each_frame=args.clear
        )
        return 0

    app = QApplication(sys.argv if argv is None else [sys.argv[0], *argv])
    audio = MicrophoneFeatures(
        block_size=args.block_size,
        enabled=not args.no_audio,
        remembered=settings.get(MICROPHONE_ACCESS_KEY),
        on_decision=remember_microphone_access
    )
    canvas = Canvas(CANVAS_SIZE, CANVAS_SIZE)
    sketch = Sketch(
        canvas,
        audio=audio,
        agent_count=args.agents,
        seed=args.seed,
        draw_boundaries=args.draw_boundaries,
        clear_each_frame=args.clear
    )
    window = SketchWindow(sketch, fps=args.fps)
    window.show()
    return app.exec_()


if __name__ == '__main__':
    sys.exit(main())
