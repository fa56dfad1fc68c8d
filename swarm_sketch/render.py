"""
Offline renderer: run the sketch headless for a number of frames and save a PNG.
Optionally drives the colours from a WAV file instead of the microphone.
"""

import os

from PyQt5.QtWidgets import QApplication

from .audio import WaveFileFeatures
from .canvas import Canvas
from .console import print
from .sketch import Sketch


def render_frames(output, frames, width=700, height=700, agent_count=50, seed=None,
                  audio_file=None, fps=60, draw_boundaries=False, clear_each_frame=False):
    """Draw `frames` frames and write the final canvas to `output`

    Returns the total number of lines drawn.
    """
    # If running headless, use offscreen rendering
    if os.environ.get("DISPLAY", "") == "":
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance() or QApplication([])

    audio = WaveFileFeatures(audio_file) if audio_file else None
    if audio is not None:
        print(f"Audio: {audio.sample_rate} Hz, duration={audio.duration:.2f}s")

    canvas = Canvas(width, height)
    sketch = Sketch(
        canvas,
        audio=audio,
        agent_count=agent_count,
        seed=seed,
        draw_boundaries=draw_boundaries,
        clear_each_frame=clear_each_frame
    )

    print(f"Rendering {frames} frames -> {width}x{height}")
    total_lines = 0
    for frame_idx in range(frames):
        if audio is not None:
            audio.advance(canvas.frame_count, fps)
        total_lines += sketch.draw()
        canvas.next_frame()

        if frame_idx % max(1, int(fps)) == 0:
            print(f"Rendered {frame_idx + 1}/{frames} frames {frame_idx / frames * 100:.1f}%", debug_only=True)

    if not canvas.save(output):
        raise RuntimeError(f"Could not write image to {output}")
    print(f"✓ Saved {output} ({total_lines} lines)")

    return total_lines
