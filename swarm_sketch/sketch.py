"""
The sketch: a swarm of agents joined by audio-coloured lines

draw() runs once per frame on the render thread:
    1. advance the hue timer every 1000 frames
    2. on frame 0, ask for the microphone; afterwards poll the request
    3. move and bounce every agent
    4. derive hue/brightness from the hue timer and (if live) the microphone
    5. draw a line between every pair of overlapping agents
"""

import itertools
import random

from .agent import Agent
from .audio import AudioFeatures, note_name
from .canvas import HSBColor, WHITE
from .console import print
from .geometry import Point, Vector, distance_between, map_range

HUE_TIMER_PERIOD = 1000  # frames between hue steps (~15 s at 60 FPS)
HUE_STEP = 50

# Audio -> colour ranges
FREQUENCY_RANGE = (0, 2500)        # Hz, mapped onto [x, x + 100] degrees of hue
HUE_SPREAD = 100
AMPLITUDE_RANGE = (0, 1)           # mapped onto brightness
BRIGHTNESS_RANGE = (25, 100)
DEFAULT_BRIGHTNESS = 5

# Line length -> alpha
DISTANCE_RANGE = (0, 110)
ALPHA_RANGE = (0, 10)

# Pitch naming only runs for loud, plausible readings
NOTE_AMPLITUDE_THRESHOLD = 0.1
NOTE_MAX_FREQUENCY = 7000


class Sketch:
    def __init__(self, canvas, audio=None, agent_count=50, seed=None, draw_boundaries=False,
                 clear_each_frame=False):
        self.canvas = canvas
        self.audio = audio if audio is not None else AudioFeatures()
        self.draw_boundaries = draw_boundaries
        self.clear_each_frame = clear_each_frame
        self.rng = random.Random(seed)

        # No fill on the canvas
        self.canvas.draw_shapes_with_fill = False

        self.agents = [self._random_agent() for _ in range(agent_count)]

        # Hue timer: picks the colour family of the animation
        self.x = self.rng.uniform(0, 360)

        # Informational only, never used for drawing
        self.last_note = None

    def _random_agent(self):
        mid_x = self.canvas.width // 2
        mid_y = self.canvas.height // 2
        return Agent(
            centre=Point(self.rng.randint(mid_x - 5, mid_x + 5), self.rng.randint(mid_y - 5, mid_y + 5)),
            radius=self.rng.randint(35, 55),
            velocity=Vector(self.rng.uniform(-2, 2), self.rng.uniform(-2, 2)),
            canvas=self.canvas
        )

    def advance_hue_timer(self):
        """Step the hue by 50; past 360 it restarts somewhere in [0, 15]"""
        if self.x + HUE_STEP > 360:
            self.x = self.rng.uniform(0, 15)
        else:
            self.x += HUE_STEP
        print(f"Hue timer: {self.x:.1f}", debug_only=True)

    def draw(self):
        """Render one frame, returns the number of lines drawn"""
        if self.canvas.frame_count % HUE_TIMER_PERIOD == 0:
            self.advance_hue_timer()

        # On the first frame, ask for the microphone. The answer arrives later.
        if self.canvas.frame_count == 0:
            self.audio.request_access()
        self.audio.poll()

        # One painter for the whole frame
        with self.canvas.batch():
            if self.clear_each_frame:
                self.clear_canvas()

            for agent in self.agents:
                agent.update(drawing_boundary=self.draw_boundaries)

            hue, brightness = self.line_hue_and_brightness()
            return self.connect_overlapping(hue, brightness)

    def line_hue_and_brightness(self):
        hue = self.x
        brightness = DEFAULT_BRIGHTNESS

        if self.audio.is_active():
            amplitude = self.audio.amplitude()
            frequency = self.audio.frequency()
            self._track_note(amplitude, frequency)

            hue = map_range(frequency, *FREQUENCY_RANGE, self.x, self.x + HUE_SPREAD)
            brightness = map_range(amplitude, *AMPLITUDE_RANGE, *BRIGHTNESS_RANGE)

        return hue, brightness

    def _track_note(self, amplitude, frequency):
        if amplitude <= NOTE_AMPLITUDE_THRESHOLD or frequency >= NOTE_MAX_FREQUENCY:
            return
        note = note_name(frequency)
        if note is not None and note != self.last_note:
            self.last_note = note
            print(f"Note: {note[0]} / {note[1]} ({frequency:.1f}Hz, amplitude {amplitude:.2f})",
                  debug_only=True)

    def overlapping_pairs(self):
        """Every unordered pair of agents whose circles intersect"""
        for a, b in itertools.combinations(self.agents, 2):
            if a.is_overlapping(b):
                yield a, b

    def connect_overlapping(self, hue, brightness):
        lines = 0
        for a, b in self.overlapping_pairs():
            # Longer lines are more opaque
            alpha = map_range(distance_between(a.centre, b.centre), *DISTANCE_RANGE, *ALPHA_RANGE)
            self.canvas.line_color = HSBColor(hue, 100, brightness, alpha)
            self.canvas.draw_line(a.centre, b.centre)
            lines += 1
        return lines

    def clear_canvas(self):
        """Paint the whole canvas white"""
        self.canvas.draw_shapes_with_borders = False
        self.canvas.draw_shapes_with_fill = True
        self.canvas.fill_color = WHITE
        self.canvas.draw_rectangle(Point(0, 0), self.canvas.width, self.canvas.height)
        self.canvas.draw_shapes_with_fill = False
        self.canvas.draw_shapes_with_borders = True
