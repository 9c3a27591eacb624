"""Core game logic for Salvo, independent of rendering."""

from salvo_game.core.ballistics import (
    Collision,
    Explosion,
    FlightResult,
    Projectile,
    Trajectory,
    simulate_flight,
)
from salvo_game.core.brain import Brain, ComputerBrain, HumanBrain, ShotChoice
from salvo_game.core.clock import Clock, ManualClock, SystemClock
from salvo_game.core.context import GameContext
from salvo_game.core.cosmos import Cosmos, Leaderboard, LeaderboardEntry, PlayerInfo
from salvo_game.core.damage import DamageReport, DamageResolver
from salvo_game.core.errors import (
    DomainError,
    InsufficientFundsError,
    OutOfAmmoError,
    RejectedOperation,
)
from salvo_game.core.persistence import load_game, save_game
from salvo_game.core.player import COLORS, Player, PlayerColor, with_alpha
from salvo_game.core.round import NextTurnInfo, Round
from salvo_game.core.session import GameSession, RenderSnapshot
from salvo_game.core.settings import GameSettings, PlayerSetup, default_roster
from salvo_game.core.states import GameButton, GameState
from salvo_game.core.terrain import Terrain, TerrainSettings
from salvo_game.core.weapons import UNLIMITED, WEAPONS, Armory, WeaponKind

__all__ = [
    "Armory",
    "Brain",
    "COLORS",
    "Clock",
    "Collision",
    "ComputerBrain",
    "Cosmos",
    "DamageReport",
    "DamageResolver",
    "DomainError",
    "Explosion",
    "FlightResult",
    "GameButton",
    "GameContext",
    "GameSession",
    "GameSettings",
    "GameState",
    "HumanBrain",
    "InsufficientFundsError",
    "Leaderboard",
    "LeaderboardEntry",
    "ManualClock",
    "NextTurnInfo",
    "OutOfAmmoError",
    "Player",
    "PlayerColor",
    "PlayerInfo",
    "PlayerSetup",
    "Projectile",
    "RejectedOperation",
    "RenderSnapshot",
    "Round",
    "ShotChoice",
    "SystemClock",
    "Terrain",
    "TerrainSettings",
    "Trajectory",
    "UNLIMITED",
    "WEAPONS",
    "WeaponKind",
    "default_roster",
    "load_game",
    "save_game",
    "simulate_flight",
    "with_alpha",
]
