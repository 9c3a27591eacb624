from dataclasses import replace

import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from salvo_game.core.context import GameContext
from salvo_game.core.errors import DomainError
from salvo_game.core.player import MAX_POWER
from salvo_game.core.settings import COMPUTER_HARD, HUMAN, PlayerSetup
from salvo_game.core.states import (
    MAX_CHARGE_MILLIS,
    BallisticsState,
    BuyWeaponsState,
    ComputerMoveState,
    GameButton,
    HumanMoveState,
    LeaderboardState,
    TurnStartState,
    initial_state,
    power_for_hold,
    state_from_record,
)
from salvo_game.core.weapons import WeaponKind


@pytest.mark.property
@settings(max_examples=200, deadline=None)
@given(
    earlier=st.integers(min_value=0, max_value=10_000),
    later=st.integers(min_value=0, max_value=10_000),
)
def test_power_grows_with_hold_time(earlier: int, later: int) -> None:
    if earlier > later:
        earlier, later = later, earlier

    assert power_for_hold(earlier) <= power_for_hold(later)
    assert 0 <= power_for_hold(later) <= MAX_POWER
    if later >= MAX_CHARGE_MILLIS:
        assert power_for_hold(later) == MAX_POWER


def test_power_reference_points() -> None:
    assert power_for_hold(0) == 0
    assert power_for_hold(1_200) == 500
    assert power_for_hold(MAX_CHARGE_MILLIS) == MAX_POWER


def _human_turn(ctx: GameContext) -> HumanMoveState:
    ctx.round.cur_player_id = 0
    state = HumanMoveState()
    state.on_enter(ctx)
    return state


def test_release_without_press_is_ignored(duel_context) -> None:
    state = _human_turn(duel_context)

    assert not state.on_button(duel_context, GameButton.RELEASE_FIRE)
    assert state.tick(duel_context) is None
    assert state.blocking_delay() == 0


def test_press_with_empty_weapon_is_ignored(duel_context) -> None:
    state = _human_turn(duel_context)
    duel_context.round.cur_player.selected_weapon = WeaponKind.MISSILE

    state.on_button(duel_context, GameButton.PRESS_FIRE)

    assert state.fire_millis is None
    assert "No Missile left" in duel_context.message


def test_hold_and_release_fires_at_charged_power(duel_context, manual_clock) -> None:
    state = _human_turn(duel_context)
    player = duel_context.round.cur_player

    assert state.on_button(duel_context, GameButton.PRESS_FIRE)
    assert state.blocking_delay() == 1
    manual_clock.advance(1_200)
    assert state.current_power(duel_context) == 500
    assert not state.on_button(duel_context, GameButton.ARMORY_RIGHT)
    assert player.selected_weapon is WeaponKind.BABY_MISSILE
    assert not state.on_aim(duel_context, 10)
    state.on_button(duel_context, GameButton.RELEASE_FIRE)
    manual_clock.advance(500)

    next_state = state.tick(duel_context)

    assert isinstance(next_state, BallisticsState)
    assert next_state.power == 500
    assert next_state.weapon is WeaponKind.BABY_MISSILE


def test_preset_power_fires_on_ok(duel_context) -> None:
    state = _human_turn(duel_context)

    assert not state.on_button(duel_context, GameButton.OK)
    state.on_power(duel_context, 640)
    assert state.current_power(duel_context) == 640
    state.on_button(duel_context, GameButton.OK)

    next_state = state.tick(duel_context)

    assert isinstance(next_state, BallisticsState)
    assert next_state.power == 640


def test_aim_and_weapon_cycling_before_fire(duel_context) -> None:
    state = _human_turn(duel_context)
    player = duel_context.round.cur_player

    assert state.on_aim(duel_context, 250)
    assert player.angle_deg == 180
    assert not state.on_aim(duel_context, 180)
    assert state.on_button(duel_context, GameButton.ARMORY_LEFT)
    assert player.selected_weapon is WeaponKind.NUKE
    assert "[0]" in duel_context.message


def test_firing_last_unit_moves_selection(duel_context) -> None:
    state = _human_turn(duel_context)
    player = duel_context.round.cur_player
    player.armory.add(WeaponKind.BABY_NUKE, 1)
    player.selected_weapon = WeaponKind.BABY_NUKE
    state.on_power(duel_context, 300)
    state.on_button(duel_context, GameButton.OK)

    next_state = state.tick(duel_context)

    assert next_state.weapon is WeaponKind.BABY_NUKE
    assert player.armory.count(WeaponKind.BABY_NUKE) == 0
    assert player.selected_weapon is WeaponKind.BABY_MISSILE


def test_computer_turn_waits_then_fires(duel_settings, manual_clock) -> None:
    roster = [PlayerSetup("Cyan", COMPUTER_HARD, 100, "cyan"), PlayerSetup("Red", HUMAN, 100, "red")]
    ctx = GameContext.new_match(
        replace(duel_settings, computer_think_millis=600), roster, clock=manual_clock
    )
    ctx.round.cur_player_id = 0
    state = ComputerMoveState()
    state.on_enter(ctx)

    assert state.tick(ctx) is None
    manual_clock.advance(600)
    next_state = state.tick(ctx)

    assert isinstance(next_state, BallisticsState)
    assert 0 <= next_state.power <= MAX_POWER
    assert next_state.weapon is WeaponKind.BABY_MISSILE
    assert state.blocking_delay() == 1


def test_self_kill_costs_earnings_not_cash(duel_context, manual_clock) -> None:
    ctx = duel_context
    ctx.round.cur_player_id = 0
    shooter, other = ctx.round.players
    state = BallisticsState(power=0, weapon=WeaponKind.NUKE)
    state.on_enter(ctx)
    state.projectile.retire()
    state.explosion.initialize(*shooter.center(), WeaponKind.NUKE, ctx.now())

    manual_clock.advance(1_000)
    assert state.tick(ctx) is None

    assert not shooter.alive
    assert other.alive
    assert shooter.info.earnings == -ctx.settings.kill_reward
    assert shooter.info.cash == ctx.settings.starting_cash
    assert isinstance(state.tick(ctx), TurnStartState)


def test_turn_start_reports_draw(duel_context) -> None:
    for player in duel_context.round.players:
        player.life = 0
    state = TurnStartState()
    state.on_enter(duel_context)

    next_state = state.tick(duel_context)

    assert isinstance(next_state, LeaderboardState)
    assert duel_context.message == "It's a draw!"
    assert all(info.earnings == 0 for info in duel_context.cosmos.player_info)


def test_turn_start_dispatches_on_brain(duel_context) -> None:
    state = TurnStartState()
    state.on_enter(duel_context)

    assert isinstance(state.tick(duel_context), HumanMoveState)
    assert duel_context.round.cur_player_id == 0
    assert duel_context.message == "Alpha's turn"


def test_last_leaderboard_ends_the_match(duel_context) -> None:
    duel_context.cosmos.next_round()
    state = LeaderboardState()
    state.on_enter(duel_context)

    assert duel_context.message.startswith("Game over!")
    assert state.tick(duel_context) is None
    assert not duel_context.match_over
    state.on_button(duel_context, GameButton.OK)
    assert state.tick(duel_context) is None
    assert duel_context.match_over


def test_buy_phase_follows_leaderboard_when_enabled(duel_context) -> None:
    duel_context.settings = replace(duel_context.settings, buy_phase=True)
    state = LeaderboardState()
    state.on_enter(duel_context)
    state.on_button(duel_context, GameButton.OK)

    next_state = state.tick(duel_context)

    assert isinstance(next_state, BuyWeaponsState)
    assert duel_context.cosmos.cur_round == 2
    assert initial_state(duel_context) == BuyWeaponsState()


def test_computers_shop_only_once(duel_settings, manual_clock) -> None:
    roster = [PlayerSetup("Red", HUMAN, 100, "red"), PlayerSetup("Cyan", COMPUTER_HARD, 100, "cyan")]
    ctx = GameContext.new_match(replace(duel_settings, buy_phase=True), roster, clock=manual_clock)
    computer = ctx.round.players[1]
    state = BuyWeaponsState()

    state.on_enter(ctx)
    cash_after_shopping = computer.info.cash
    resumed = BuyWeaponsState.from_record(state.to_record())
    resumed.on_enter(ctx)

    assert cash_after_shopping < ctx.settings.starting_cash
    assert computer.info.cash == cash_after_shopping
    assert not resumed.on_buy(ctx, 1, WeaponKind.MISSILE)


def test_humans_buy_until_broke(duel_settings, manual_clock) -> None:
    ctx = GameContext.new_match(
        replace(duel_settings, buy_phase=True, starting_cash=13_000),
        [PlayerSetup("Red", HUMAN, 100, "red"), PlayerSetup("Blue", HUMAN, 100, "blue")],
        clock=manual_clock,
    )
    buyer = ctx.round.players[0]
    state = BuyWeaponsState()
    state.on_enter(ctx)

    assert state.on_buy(ctx, 0, WeaponKind.NUKE)
    assert buyer.armory.count(WeaponKind.NUKE) == 1
    assert state.on_buy(ctx, 0, WeaponKind.NUKE)
    assert "can't afford" in ctx.message
    assert buyer.info.cash == 1_000
    assert state.on_buy(ctx, 0, WeaponKind.BABY_MISSILE)
    assert "unlimited" in ctx.message
    assert buyer.info.cash == 1_000
    assert state.tick(ctx) is None
    state.on_button(ctx, GameButton.OK)
    assert isinstance(state.tick(ctx), TurnStartState)


def test_ballistics_record_keeps_only_shot() -> None:
    state = BallisticsState(power=720, weapon=WeaponKind.MISSILE)

    record = state.to_record()
    restored = state_from_record(record)

    assert record == {"id": 20, "power": 720, "weapon": "missile"}
    assert isinstance(restored, BallisticsState)
    assert (restored.power, restored.weapon) == (720, WeaponKind.MISSILE)
    assert not restored.projectile.in_use


@pytest.mark.parametrize(
    "state_id, expected",
    [
        (0, LeaderboardState),
        (5, BuyWeaponsState),
        (10, TurnStartState),
        (15, HumanMoveState),
        (16, ComputerMoveState),
    ],
)
def test_states_restore_from_their_ids(state_id, expected) -> None:
    assert isinstance(state_from_record({"id": state_id}), expected)


def test_unknown_state_id_is_fatal() -> None:
    with pytest.raises(DomainError, match="can't recognize state with ID = 99"):
        state_from_record({"id": 99})
