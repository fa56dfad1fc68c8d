"""Settings persistence: config location, save/load round trip, bad files."""

import json

from swarm_sketch.settings import (MICROPHONE_ACCESS_KEY, forget_microphone_access, get_config_dir, get_settings_file, load_settings,
                                   remember_microphone_access, save_settings, update_settings)


def test_config_dir_under_home(config_home):
    config_dir = get_config_dir()
    assert config_dir.exists()
    assert config_home in config_dir.parents
    assert get_settings_file() == config_dir / 'settings.json'


def test_round_trip(config_home):
    test_settings = {
        'fps': 120,
        'agents': 80,
        'seed': 12345,
        'no_audio': False,
        'block_size': 2048,
        'draw_boundaries': True,
        'clear': False,
        MICROPHONE_ACCESS_KEY: 'authorized',
    }
    save_settings(test_settings)

    with open(get_settings_file(), 'r') as f:
        assert json.load(f) == test_settings
    assert load_settings() == test_settings


def test_missing_file_is_empty(config_home):
    assert load_settings() == {}


def test_corrupt_file_is_empty(config_home, capsys):
    get_settings_file().write_text("{not json")
    assert load_settings() == {}
    assert "Could not load settings file" in capsys.readouterr().out


def test_non_object_file_is_empty(config_home):
    get_settings_file().write_text("[1, 2, 3]")
    assert load_settings() == {}


def test_update_merges(config_home):
    save_settings({'fps': 30})
    update_settings(agents=10)
    assert load_settings() == {'fps': 30, 'agents': 10}


def test_remember_microphone_access(config_home):
    remember_microphone_access('denied')
    assert load_settings()[MICROPHONE_ACCESS_KEY] == 'denied'


def test_forget_microphone_access_keeps_other_settings(config_home):
    save_settings({'fps': 30, MICROPHONE_ACCESS_KEY: 'denied'})
    assert forget_microphone_access() == {'fps': 30}
    assert load_settings() == {'fps': 30}


def test_forget_without_stored_decision(config_home):
    assert forget_microphone_access() == {}
    assert not get_settings_file().exists()
