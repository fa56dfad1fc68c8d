"""
Swarm Sketch: audio-reactive generative art
A swarm of circular agents drifts around a canvas and draws lines between
overlapping neighbours, coloured by microphone pitch and loudness.
"""

__version__ = "1.0.0"
