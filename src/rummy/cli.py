"""
Command-line interface for the rummy engine.

Usage examples:

    rummy deal --players 3 --seed 7
    rummy arrange "AS 2S 3S 5H 6H JK 9C 9D 9H KS KH KD KC"
    rummy simulate --games 50 --bots easy medium hard --variant points
"""
from __future__ import annotations

import argparse
import logging
import random
from typing import Optional

from .agents import Difficulty
from .arrangement import auto_arrange_hand, declaration_hints, find_declaration
from .config import POOL_LIMITS, GameConfig, Variant
from .deal import MAX_PLAYERS, MIN_PLAYERS, deal_round
from .deck import CARDS_PER_PLAYER, parse_hand
from .hand import smart_sort
from .simulate import simulate_games


def _format_cards(cards) -> str:
    return " ".join(str(c) for c in cards)


def _add_deal_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "deal",
        help="Deal one round and print the hands, wild joker and piles.",
    )
    parser.add_argument(
        "--players",
        type=int,
        default=2,
        help=f"Number of players at the table ({MIN_PLAYERS}-{MAX_PLAYERS}).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible deal.",
    )
    parser.set_defaults(func=_cmd_deal)


def _cmd_deal(args: argparse.Namespace) -> None:
    if not MIN_PLAYERS <= args.players <= MAX_PLAYERS:
        raise SystemExit(f"--players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
    rng = random.Random(args.seed)
    ids = [f"P{i + 1}" for i in range(args.players)]
    dealt = deal_round(ids, rng=rng)
    print(f"Wild joker: {dealt.wild_indicator}")
    print(f"Open card: {_format_cards(dealt.discard_pile)}")
    print(f"Draw pile: {len(dealt.draw_pile)} cards")
    for pid in ids:
        hand = smart_sort(dealt.hands[pid])
        analysis = auto_arrange_hand(hand)
        print(f"{pid}: {_format_cards(hand)}  (deadwood {analysis.deadwood_points})")


def _add_arrange_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "arrange",
        help="Arrange a 13 or 14 card hand into melds and report whether it declares.",
    )
    parser.add_argument(
        "hand",
        help='Cards separated by spaces, e.g. "10S JS QS 5H* JK". "*" marks a wild joker.',
    )
    parser.set_defaults(func=_cmd_arrange)


def _cmd_arrange(args: argparse.Namespace) -> None:
    try:
        cards = parse_hand(args.hand)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    show_card = None
    analysis = None
    if len(cards) == CARDS_PER_PLAYER + 1:
        found = find_declaration(cards)
        if found is not None:
            show_card, analysis = found
    if analysis is None:
        analysis = auto_arrange_hand(cards)

    for meld in analysis.melds:
        print(f"{meld.type.value:>13}: {_format_cards(meld.cards)}")
    print(f"     deadwood: {_format_cards(analysis.deadwood) or '-'} ({analysis.deadwood_points} pts)")
    if show_card is not None:
        print(f"Discard {show_card} and declare.")
    elif analysis.can_declare and len(cards) == CARDS_PER_PLAYER:
        print("Ready to declare.")
    else:
        for hint in declaration_hints(cards):
            print(f"- {hint}")


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play bot-only games and report win rates and scores per seat.",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=20,
        help="Number of games to play.",
    )
    parser.add_argument(
        "--bots",
        nargs="+",
        choices=[d.value for d in Difficulty],
        default=["easy", "medium", "hard"],
        help="Difficulty of each seat, in seat order.",
    )
    parser.add_argument(
        "--variant",
        choices=[v.value for v in Variant],
        default=Variant.POINTS.value,
        help="Game variant.",
    )
    parser.add_argument(
        "--pool-limit",
        type=int,
        choices=POOL_LIMITS,
        default=101,
        help="Elimination threshold for pool games.",
    )
    parser.add_argument(
        "--deals",
        type=int,
        default=2,
        help="Number of rounds for deals games.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed.",
    )
    parser.set_defaults(func=_cmd_simulate)


def _cmd_simulate(args: argparse.Namespace) -> None:
    if not MIN_PLAYERS <= len(args.bots) <= MAX_PLAYERS:
        raise SystemExit(f"--bots needs {MIN_PLAYERS} to {MAX_PLAYERS} seats")
    config = GameConfig(
        variant=Variant(args.variant),
        pool_limit=args.pool_limit,
        number_of_deals=args.deals,
    )
    summary = simulate_games(
        args.games,
        [Difficulty(b) for b in args.bots],
        config=config,
        seed=args.seed,
    )
    print(
        f"{summary.completed}/{summary.games} games completed, "
        f"{summary.mean_rounds:.1f} rounds per game"
    )
    for pid, difficulty in zip(summary.player_ids, summary.difficulties):
        print(
            f"{pid} ({difficulty}): win rate {summary.win_rates[pid]:.1%}, "
            f"score {summary.mean_scores[pid]:.1f} ± {summary.std_scores[pid]:.1f}"
        )
    for kind, count in sorted(summary.declaration_counts.items()):
        print(f"  {kind}: {count}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rummy", description="13-card Indian Rummy engine CLI.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output (bot decisions, round results).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_deal_parser(subparsers)
    _add_arrange_parser(subparsers)
    _add_simulate_parser(subparsers)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
