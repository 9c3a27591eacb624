import math

import pytest

from salvo_game.core.cosmos import PlayerInfo
from salvo_game.core.errors import DomainError
from salvo_game.core.player import (
    COLORS,
    MAX_POWER,
    TURRET_LENGTH,
    Player,
    clamp_power,
    color_rgb,
    with_alpha,
)
from salvo_game.core.weapons import WeaponKind


def test_angle_and_radians_stay_in_sync(flat_terrain, make_player) -> None:
    player = make_player(0, 100, flat_terrain)

    for angle in (0, 37, 90, 145, 180):
        player.set_angle_deg(angle)
        assert player.angle_deg == angle
        assert player.angle_rad == pytest.approx(math.radians(angle))


def test_angle_input_is_clamped(flat_terrain, make_player) -> None:
    player = make_player(0, 100, flat_terrain, angle=90)

    assert player.set_angle_deg(-40)
    assert player.angle_deg == 0
    assert player.set_angle_deg(400)
    assert player.angle_deg == 180
    assert not player.set_angle_deg(180.2)


def test_power_is_clamped() -> None:
    assert clamp_power(-10) == 0
    assert clamp_power(5_000) == MAX_POWER
    assert clamp_power(420.4) == 420


def test_turret_tip_follows_angle(flat_terrain, make_player) -> None:
    player = make_player(0, 100, flat_terrain, angle=0)

    tip_x, tip_y = player.turret_tip()

    assert tip_x == pytest.approx(100 + TURRET_LENGTH)
    assert tip_y == pytest.approx(player.turret_center_y())

    player.set_angle_deg(90)
    tip_x, tip_y = player.turret_tip()
    assert tip_x == pytest.approx(100)
    assert tip_y == pytest.approx(player.turret_center_y() + TURRET_LENGTH)


def test_damage_floors_life_at_zero(flat_terrain, make_player) -> None:
    player = make_player(0, 100, flat_terrain, life=30)

    assert player.take_damage(12) == 12
    assert player.take_damage(50) == 18
    assert player.life == 0
    assert not player.alive


def test_falling_only_moves_down(flat_terrain, make_player) -> None:
    player = make_player(0, 100, flat_terrain)

    flat_terrain.carve(100, 50, 10)
    assert player.do_falling(flat_terrain)
    assert player.y == pytest.approx(40.0)
    assert not player.do_falling(flat_terrain)


def test_hit_test_uses_body_box(flat_terrain, make_player) -> None:
    player = make_player(0, 100, flat_terrain)

    assert player.hit_test(100, 55)
    assert player.hit_test(114, 70)
    assert not player.hit_test(116, 55)
    assert not player.hit_test(100, 49)


def test_record_round_trip(flat_terrain, make_player) -> None:
    player = make_player(3, 120, flat_terrain, angle=33, name="Gunner", color="green")
    player.selected_weapon = WeaponKind.MISSILE
    player.life = 64

    info = PlayerInfo.from_initial(500)
    restored = Player.from_record(3, player.to_record(), info)

    assert restored.name == "Gunner"
    assert restored.color == "green"
    assert restored.angle_deg == 33
    assert restored.angle_rad == pytest.approx(math.radians(33))
    assert restored.life == 64
    assert restored.selected_weapon is WeaponKind.MISSILE
    assert restored.info is info
    assert restored.brain.is_human


def test_colors_table_and_alpha() -> None:
    assert len(COLORS) == 10
    assert color_rgb("red") == COLORS["red"].rgb
    assert with_alpha(0x123456, 0x80) == 0x80123456
    with pytest.raises(DomainError):
        color_rgb("chartreuse")
