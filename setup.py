#!/usr/bin/env python3
"""
Setup script for Swarm Sketch
"""

from setuptools import setup, find_packages

# Read long description from README
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

install_requires = [
    "numpy>=1.21.0",
    "PyQt5>=5.15.0",
    "sounddevice>=0.4.6",
    "scipy>=1.7.0",  # WAV input for offline renders
]

extras_require = {
    'test': ['pytest>=7.0'],
}

setup(
    name="swarm-sketch",
    version="1.0.0",
    description="Audio-reactive generative art: a swarm of agents joined by microphone-coloured lines",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Multimedia :: Graphics",
        "Topic :: Multimedia :: Sound/Audio :: Analysis",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "swarm-sketch=swarm_sketch.app:main",
        ],
    },
    keywords="generative art swarm audio visualizer microphone pitch",
)
