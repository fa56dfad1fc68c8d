"""Settings persistence (cross-platform JSON file in the user's config dir)"""

import json
import platform
from pathlib import Path

from .console import print

APP_DIR_NAME = 'swarm-sketch'

# Keys main() accepts from the settings file as argparse defaults
PERSISTED_OPTIONS = ('fps', 'agents', 'seed', 'no_audio', 'block_size', 'draw_boundaries', 'clear')
MICROPHONE_ACCESS_KEY = 'microphone_access'


def get_config_dir():
    """Get platform-appropriate config directory for settings persistence"""
    system = platform.system()
    if system == 'Windows':
        # Windows: Use AppData/Roaming
        config_dir = Path.home() / 'AppData' / 'Roaming' / APP_DIR_NAME
    elif system == 'Darwin':
        # macOS: Use Library/Application Support
        config_dir = Path.home() / 'Library' / 'Application Support' / APP_DIR_NAME
    else:
        # Linux and others: Use ~/.config (XDG standard)
        config_dir = Path.home() / '.config' / APP_DIR_NAME

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_settings_file():
    """Get path to settings JSON file"""
    return get_config_dir() / 'settings.json'


def load_settings():
    """Load settings from file, return dict or empty dict if file doesn't exist"""
    settings_file = get_settings_file()

    if settings_file.exists():
        try:
            with open(settings_file, 'r') as f:
                settings = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            print(f"Warning: Could not load settings file: {e}")
            return {}
        if not isinstance(settings, dict):
            print(f"Warning: Ignoring malformed settings file: {settings_file}")
            return {}
        return settings

    return {}


def save_settings(settings):
    """Save settings to file"""
    settings_file = get_settings_file()

    try:
        with open(settings_file, 'w') as f:
            json.dump(settings, f, indent=2)
    except OSError as e:
        print(f"Warning: Could not save settings file: {e}")


def update_settings(**values):
    """Merge values into the stored settings"""
    settings = load_settings()
    settings.update(values)
    save_settings(settings)
    return settings


def remember_microphone_access(decision):
    update_settings(**{MICROPHONE_ACCESS_KEY: decision})


def forget_microphone_access():
    """Drop the stored decision so the next run checks the device again"""
    settings = load_settings()
    if settings.pop(MICROPHONE_ACCESS_KEY, None) is not None:
        save_settings(settings)
    return settings
