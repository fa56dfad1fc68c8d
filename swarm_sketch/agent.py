"""
Agents: circles that drift across the canvas and bounce inside a fixed square
"""

from .geometry import Point, distance_between, translate

# Half-width of the square the agents bounce inside, measured from the canvas
# midpoint. Fixed, independent of the canvas size.
BOUNCE_HALF_WIDTH = 350


class Agent:
    """A circle with a centre, a fixed radius and a velocity"""

    def __init__(self, centre, radius, velocity, canvas):
        if radius <= 0:
            raise ValueError(f"radius must be positive, got {radius}")
        self.centre = centre
        self._radius = int(radius)
        self.velocity = velocity
        # Canvas the agent draws upon (also gives the bounce midpoint)
        self.canvas = canvas

    @property
    def radius(self):
        return self._radius

    def update(self, drawing_boundary=False):
        """Move one step, bounce if needed, optionally outline the circle"""
        self.centre = translate(self.centre, self.velocity)
        self.bounce_at_edge()

        if drawing_boundary:
            self.canvas.draw_ellipse(self.centre, self.radius * 2, self.radius * 2)

    def bounce_at_edge(self):
        """Send the agent back to the middle and reverse it when it leaves the square"""
        mid_x = self.canvas.width // 2
        mid_y = self.canvas.height // 2

        if (self.centre.x + self.radius > mid_x + BOUNCE_HALF_WIDTH
                or self.centre.x - self.radius < mid_x - BOUNCE_HALF_WIDTH):
            self.centre = Point(mid_x, mid_y)
            self.velocity = self.velocity.flipped_x()

        if (self.centre.y + self.radius > mid_y + BOUNCE_HALF_WIDTH
                or self.centre.y - self.radius < mid_y - BOUNCE_HALF_WIDTH):
            self.centre = Point(mid_x, mid_y)
            self.velocity = self.velocity.flipped_y()

    def is_overlapping(self, other):
        """True when the two circles intersect (touching does not count)"""
        return self.distance_between(self.centre, other.centre) < self.radius + other.radius

    @staticmethod
    def distance_between(a, b):
        return distance_between(a, b)

    def __repr__(self):
        return (
            f"Agent(centre=[{self.centre.x:.2f}, {self.centre.y:.2f}], "
            f"radius={self.radius}, "
            f"velocity=[{self.velocity.x:.2f}, {self.velocity.y:.2f}])"
        )
