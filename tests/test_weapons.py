import pytest

from salvo_game.core.errors import DomainError, OutOfAmmoError
from salvo_game.core.weapons import (
    DEFAULT_WEAPON,
    MINIMUM_WEAPON_COST,
    UNLIMITED,
    WEAPON_ORDER,
    Armory,
    WeaponKind,
    weapon_from_id,
)


def test_default_armory_has_unlimited_baby_missiles() -> None:
    armory = Armory.from_default()

    assert armory.count(DEFAULT_WEAPON) == UNLIMITED
    assert armory.describe(DEFAULT_WEAPON) == "[∞]"
    assert list(armory.owned()) == [WeaponKind.BABY_MISSILE]
    assert MINIMUM_WEAPON_COST == 400


def test_cycling_wraps_and_ignores_counts() -> None:
    armory = Armory.from_default()

    assert armory.get_next_weapon(WeaponKind.NUKE) is WeaponKind.BABY_MISSILE
    assert armory.get_prev_weapon(WeaponKind.BABY_MISSILE) is WeaponKind.NUKE
    assert armory.get_next_weapon(WeaponKind.BABY_MISSILE) is WeaponKind.MISSILE

    kind = WeaponKind.BABY_MISSILE
    for _ in WEAPON_ORDER:
        kind = armory.get_next_weapon(kind)
    assert kind is WeaponKind.BABY_MISSILE


def test_unlimited_weapon_is_never_decremented() -> None:
    armory = Armory.from_default()

    for _ in range(50):
        assert armory.use_weapon(WeaponKind.BABY_MISSILE) is WeaponKind.BABY_MISSILE
    assert armory.count(WeaponKind.BABY_MISSILE) == UNLIMITED


def test_last_unit_fired_is_then_rejected() -> None:
    armory = Armory({WeaponKind.BABY_MISSILE: UNLIMITED, WeaponKind.MISSILE: 1})

    armory.use_weapon(WeaponKind.MISSILE)

    assert armory.count(WeaponKind.MISSILE) == 0
    assert not armory.can_fire(WeaponKind.MISSILE)
    with pytest.raises(OutOfAmmoError):
        armory.use_weapon(WeaponKind.MISSILE)
    assert armory.count(WeaponKind.MISSILE) == 0


def test_exhausted_weapon_advances_to_next_with_ammo() -> None:
    armory = Armory(
        {
            WeaponKind.BABY_MISSILE: UNLIMITED,
            WeaponKind.MISSILE: 1,
            WeaponKind.NUKE: 2,
        }
    )

    assert armory.use_weapon(WeaponKind.MISSILE) is WeaponKind.NUKE
    assert armory.use_weapon(WeaponKind.NUKE) is WeaponKind.NUKE
    assert armory.use_weapon(WeaponKind.NUKE) is WeaponKind.BABY_MISSILE


def test_exhausted_weapon_stays_selected_when_nothing_is_left() -> None:
    armory = Armory({WeaponKind.NUKE: 1})

    assert armory.use_weapon(WeaponKind.NUKE) is WeaponKind.NUKE
    assert list(armory.owned()) == []


def test_add_accumulates_and_skips_unlimited() -> None:
    armory = Armory.from_default()

    armory.add(WeaponKind.MISSILE, 5)
    armory.add(WeaponKind.MISSILE, 5)
    armory.add(WeaponKind.BABY_MISSILE, 10)

    assert armory.count(WeaponKind.MISSILE) == 10
    assert armory.describe(WeaponKind.MISSILE) == "[10]"
    assert armory.is_unlimited(WeaponKind.BABY_MISSILE)
    with pytest.raises(DomainError):
        armory.add(WeaponKind.MISSILE, -1)


def test_negative_counts_are_refused() -> None:
    with pytest.raises(DomainError):
        Armory({WeaponKind.MISSILE: -3})


def test_record_round_trip_and_unknown_ids() -> None:
    armory = Armory({WeaponKind.BABY_MISSILE: UNLIMITED, WeaponKind.BABY_NUKE: 3})

    restored = Armory.from_record(armory.to_record())

    assert restored.to_record() == armory.to_record()
    assert weapon_from_id("nuke") is WeaponKind.NUKE
    with pytest.raises(DomainError):
        weapon_from_id("laser")


def test_copy_is_independent() -> None:
    armory = Armory({WeaponKind.MISSILE: 2})
    clone = armory.copy()

    clone.use_weapon(WeaponKind.MISSILE)

    assert armory.count(WeaponKind.MISSILE) == 2
    assert clone.count(WeaponKind.MISSILE) == 1
