"""Entry point for playing the Salvo artillery game."""

import argparse
import logging

from salvo_game import run_pygame
from salvo_game.core.settings import MAX_PLAYERS, GameSettings, default_roster
from salvo_game.core.terrain import TERRAIN_STYLES, TerrainSettings


def main() -> None:
    parser = argparse.ArgumentParser(description="Salvo turn-based artillery")
    parser.add_argument("--rounds", type=int, help="number of rounds in the match")
    parser.add_argument(
        "--players",
        type=int,
        choices=range(2, MAX_PLAYERS + 1),
        help="number of players taken from the default roster",
    )
    parser.add_argument("--terrain", choices=TERRAIN_STYLES, help="terrain style")
    parser.add_argument("--seed", type=int, help="seed for terrain, placement and wind")
    parser.add_argument(
        "--no-threads",
        action="store_true",
        help="tick the simulation on the render loop instead of its own thread",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="print additional debug information to the console",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    kwargs = {"threaded": not args.no_threads}
    if args.rounds or args.terrain or args.seed is not None or args.players:
        defaults = GameSettings()
        kwargs["settings"] = GameSettings(
            num_rounds=args.rounds or defaults.num_rounds,
            seed=args.seed,
            terrain=TerrainSettings(style=args.terrain or defaults.terrain.style),
        )
        kwargs["roster"] = default_roster()[: args.players or 2]
    run_pygame(**kwargs)


if __name__ == "__main__":
    main()
