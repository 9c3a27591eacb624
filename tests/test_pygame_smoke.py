import pygame
import pytest

from salvo_game import SalvoApp
from salvo_game.core.settings import GameSettings, default_roster
from salvo_game.core.terrain import TerrainSettings
from salvo_game.core.weapons import WeaponKind
from salvo_game.pygame import config


def _settings() -> GameSettings:
    return GameSettings(
        seed=3,
        max_wind=0,
        random_placement=False,
        terrain=TerrainSettings(width=200, max_y=100.0, min_height=50, max_height=50, style="flat"),
    )


@pytest.fixture
def headless(monkeypatch, tmp_path):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    monkeypatch.setattr(config, "_SETTINGS_PATH", tmp_path / "user_settings.json", raising=False)
    monkeypatch.setattr(config, "_SAVE_PATH", tmp_path / "quicksave.json", raising=False)
    return tmp_path


def _key(app: SalvoApp, key: int, *, up: bool = False) -> None:
    event_type = pygame.KEYUP if up else pygame.KEYDOWN
    app.input.process_event(pygame.event.Event(event_type, key=key, mod=0))


@pytest.mark.smoke
def test_pygame_client_initialises(headless) -> None:
    """Ensure the graphical client can boot in a headless environment."""

    app = None
    try:
        app = SalvoApp(_settings(), default_roster()[:2], size=(640, 480), threaded=False)
        app._update()
        app._draw()
        assert app.snapshot is not None
        assert app.snapshot.state == "buy_weapons"
        assert len(app.snapshot.heights) == 200
    finally:
        if app:
            app.running = False
        pygame.quit()


@pytest.mark.smoke
def test_keys_drive_a_turn(headless) -> None:
    app = None
    try:
        app = SalvoApp(_settings(), default_roster()[:2], size=(640, 480), threaded=False)
        app._update()
        _key(app, pygame.K_2)
        _key(app, pygame.K_RETURN)
        for _ in range(3):
            app._update()
        red = app.session.round.players[0]
        assert red.armory.count(WeaponKind.MISSILE) == 5
        assert app.snapshot.state == "human_move"

        _key(app, pygame.K_LEFT)
        app._update()
        assert red.angle_deg == 46

        _key(app, pygame.K_SPACE)
        app._update()
        _key(app, pygame.K_SPACE, up=True)
        app._update()
        app._draw()
        assert app.snapshot.state == "ballistics"
    finally:
        if app:
            app.running = False
        pygame.quit()


@pytest.mark.smoke
def test_quick_save_and_load(headless) -> None:
    app = None
    try:
        app = SalvoApp(_settings(), default_roster()[:2], size=(640, 480), threaded=False)
        app._update()
        original = app.session
        app.quick_save()
        assert (headless / "quicksave.json").exists()

        app.quick_load()

        assert app.session is not original
        assert app.session.round.terrain.heights == original.round.terrain.heights
    finally:
        if app:
            app.running = False
        pygame.quit()


def test_user_settings_are_sanitised() -> None:
    settings, roster = config.match_from_user_settings(
        {"num_rounds": 5, "num_players": 4, "terrain_style": "rolling"}, GameSettings()
    )
    assert settings.num_rounds == 5
    assert settings.terrain.style == "rolling"
    assert len(roster) == 4

    settings, roster = config.match_from_user_settings(
        {"num_rounds": "lots", "num_players": 99, "terrain_style": "lava"}, GameSettings()
    )
    assert settings.num_rounds == GameSettings().num_rounds
    assert settings.terrain.style == "hilly"
    assert len(roster) == 2
    assert config.user_settings_for(settings, roster)["num_players"] == 2


def test_unreadable_user_settings_fall_back(monkeypatch, tmp_path) -> None:
    path = tmp_path / "user_settings.json"
    path.write_text("not json", encoding="utf-8")
    monkeypatch.setattr(config, "_SETTINGS_PATH", path)

    assert config.load_user_settings() == {}
    config.save_user_settings({"num_rounds": 4})
    assert config.load_user_settings() == {"num_rounds": 4}
