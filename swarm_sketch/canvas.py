"""
Drawing surface for the sketch

The canvas is an off-screen QImage. Shapes drawn on it stay there (nothing is
cleared between frames unless the sketch asks), and the window just blits the
image on every paint.
"""

from contextlib import contextmanager
from dataclasses import dataclass

from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QColor, QImage, QPainter, QPen


def _clamp(value, lower, upper):
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class HSBColor:
    """Colour as hue (0-360), saturation, brightness and alpha (0-100)

    Channels are truncated to ints when the colour is built, so a fractional
    alpha below 1 becomes fully transparent.
    """
    hue: int
    saturation: int
    brightness: int
    alpha: int = 100

    def __post_init__(self):
        object.__setattr__(self, 'hue', int(self.hue))
        object.__setattr__(self, 'saturation', int(self.saturation))
        object.__setattr__(self, 'brightness', int(self.brightness))
        object.__setattr__(self, 'alpha', int(self.alpha))

    def to_qcolor(self):
        """Qt colour; hue wraps around the wheel, other channels are clamped"""
        return QColor.fromHsvF(
            (self.hue % 360) / 360.0,
            _clamp(self.saturation, 0, 100) / 100.0,
            _clamp(self.brightness, 0, 100) / 100.0,
            _clamp(self.alpha, 0, 100) / 100.0,
        )


WHITE = HSBColor(0, 0, 100, 100)
BLACK = HSBColor(0, 0, 0, 100)


class Canvas:
    """Fixed-size drawing surface with a frame counter"""

    def __init__(self, width=700, height=700, background=WHITE):
        self.width = int(width)
        self.height = int(height)
        self.frame_count = 0

        # Drawing state
        self.line_color = BLACK
        self.fill_color = WHITE
        self.line_width = 1
        self.draw_shapes_with_fill = True
        self.draw_shapes_with_borders = True

        self.image = QImage(self.width, self.height, QImage.Format_RGB32)
        self.image.fill(background.to_qcolor())
        self._batch_painter = None

    @contextmanager
    def batch(self):
        """Share one painter across a run of draw calls (one frame)"""
        if self._batch_painter is not None:
            yield self
            return
        with self._painter() as painter:
            self._batch_painter = painter
            try:
                yield self
            finally:
                self._batch_painter = None

    @contextmanager
    def _painter(self):
        if self._batch_painter is not None:
            yield self._batch_painter
            return
        painter = QPainter(self.image)
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            yield painter
        finally:
            painter.end()

    def _shape_pen_and_brush(self, painter):
        if self.draw_shapes_with_borders:
            painter.setPen(QPen(self.line_color.to_qcolor(), self.line_width))
        else:
            painter.setPen(Qt.NoPen)
        if self.draw_shapes_with_fill:
            painter.setBrush(self.fill_color.to_qcolor())
        else:
            painter.setBrush(Qt.NoBrush)

    def draw_line(self, start, end):
        """Draw a line from start to end in the current line colour"""
        with self._painter() as painter:
            painter.setPen(QPen(self.line_color.to_qcolor(), self.line_width))
            painter.drawLine(QPointF(start.x, start.y), QPointF(end.x, end.y))

    def draw_ellipse(self, at, width, height):
        """Draw an axis-aligned ellipse centred on `at`"""
        with self._painter() as painter:
            self._shape_pen_and_brush(painter)
            painter.drawEllipse(QPointF(at.x, at.y), width / 2.0, height / 2.0)

    def draw_rectangle(self, at, width, height):
        """Draw a rectangle with its top-left corner at `at`"""
        with self._painter() as painter:
            self._shape_pen_and_brush(painter)
            painter.drawRect(QRectF(at.x, at.y, width, height))

    def next_frame(self):
        self.frame_count += 1

    def save(self, path):
        """Write the canvas to an image file, returns True on success"""
        return self.image.save(str(path))
