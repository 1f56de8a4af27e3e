"""
Game and round state, and the turn transitions between them.

Every transition takes a ``GameState`` and returns a new one; the input is
never modified. An action that is not legal right now (wrong player, wrong
phase, card not in hand, round already over...) returns ``None`` instead of
raising, so a UI or a bot loop can simply ignore it.

Round flow: deal -> (draw -> discard)* per seat -> someone declares, or all
but one player drop -> round scored -> next round or game over.
"""
from __future__ import annotations

import logging
import random
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple, Sequence

from .agents import BotAction, BotContext, BotDecision, Difficulty, bot_avatar, bot_name
from .config import GameConfig, Variant
from .deal import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    DrawSource,
    TurnPhase,
    deal_round,
    discard as push_discard,
    draw_from_discard,
    draw_from_pile,
    first_to_play,
    refill_draw_pile,
    top_discard,
)
from .deck import Card
from .declaration import validate_declaration
from .hand import add_card, find_card, remove_card
from .meld import Meld
from .scoring import (
    DeclarationType,
    DropKind,
    active_players,
    calculate_round_scores,
    can_rejoin,
    determine_game_winner,
    player_ranks,
    points_rummy_winnings,
    rejoin_score,
    should_game_end,
    update_cumulative_scores,
)

logger = logging.getLogger(__name__)


class RoundPhase(str, Enum):
    PLAYING = "playing"
    ENDED = "ended"


class GamePhase(str, Enum):
    PLAYING = "playing"
    ENDED = "ended"


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    is_bot: bool = False
    difficulty: Difficulty | None = None
    avatar: str = ""


class LastAction(NamedTuple):
    player_id: str
    action: str
    card: Card | None = None
    source: DrawSource | None = None


@dataclass
class RoundState:
    """
    One deal. ``seats`` are the players dealt in, in turn order; indices
    (dealer, current player) point into it. ``draws`` counts draws per player
    to tell a first drop from a middle one.
    """

    round_number: int
    seats: tuple[str, ...]
    hands: dict[str, list[Card]]
    draw_pile: list[Card]
    discard_pile: list[Card]
    wild_indicator: Card | None
    dealer_index: int
    current_player_index: int
    turn_phase: TurnPhase = TurnPhase.DRAW
    phase: RoundPhase = RoundPhase.PLAYING
    dropped: dict[str, DropKind] = field(default_factory=dict)
    draws: dict[str, int] = field(default_factory=dict)
    discard_history: list[Card] = field(default_factory=list)
    last_action: LastAction | None = None

    @property
    def current_player_id(self) -> str:
        return self.seats[self.current_player_index]

    def players_in(self) -> list[str]:
        return [pid for pid in self.seats if pid not in self.dropped]

    def card_count(self) -> int:
        return (
            sum(len(h) for h in self.hands.values())
            + len(self.draw_pile)
            + len(self.discard_pile)
        )


@dataclass(frozen=True)
class RoundResult:
    round_number: int
    winner_id: str
    declaration_type: DeclarationType
    scores: dict[str, int]
    declared_melds: tuple[Meld, ...] = ()
    final_hands: dict[str, list[Card]] = field(default_factory=dict)
    errors: tuple[str, ...] = ()
    winnings: float = 0.0


@dataclass
class GameState:
    id: str
    config: GameConfig
    players: tuple[Player, ...]
    scores: dict[str, int]
    active_player_ids: tuple[str, ...]
    current_round: RoundState | None = None
    round_results: tuple[RoundResult, ...] = ()
    phase: GamePhase = GamePhase.PLAYING
    winner_id: str | None = None
    rejoins: int = 0
    final_ranks: tuple[tuple[str, int, int], ...] = ()
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    @property
    def player_ids(self) -> list[str]:
        return [p.id for p in self.players]

    def player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None


def make_players(
    num_bots: int,
    difficulty: Difficulty = Difficulty.MEDIUM,
    human_name: str = "You",
) -> tuple[Player, ...]:
    """The human in seat 0 followed by ``num_bots`` bots of one tier."""
    difficulty = Difficulty(difficulty)
    players = [Player(id="human", name=human_name)]
    for i in range(num_bots):
        players.append(
            Player(
                id=f"bot-{i + 1}",
                name=bot_name(difficulty, i),
                is_bot=True,
                difficulty=difficulty,
                avatar=bot_avatar(difficulty, i),
            )
        )
    return tuple(players)


def _touch(state: GameState, **changes) -> GameState:
    return replace(state, updated_at=time.time(), **changes)


def _with_round(state: GameState, rnd: RoundState) -> GameState:
    return _touch(state, current_round=rnd)


def _copy_round(rnd: RoundState, **changes) -> RoundState:
    base = dict(
        hands={pid: list(h) for pid, h in rnd.hands.items()},
        draw_pile=list(rnd.draw_pile),
        discard_pile=list(rnd.discard_pile),
        dropped=dict(rnd.dropped),
        draws=dict(rnd.draws),
        discard_history=list(rnd.discard_history),
    )
    base.update(changes)
    return replace(rnd, **base)


def _playing_round(state: GameState | None) -> RoundState | None:
    if state is None or state.phase != GamePhase.PLAYING:
        return None
    rnd = state.current_round
    if rnd is None or rnd.phase != RoundPhase.PLAYING:
        return None
    return rnd


def current_player_id(state: GameState) -> str | None:
    rnd = _playing_round(state)
    return rnd.current_player_id if rnd else None


def is_bot_turn(state: GameState) -> bool:
    pid = current_player_id(state)
    if pid is None:
        return False
    player = state.player(pid)
    return player is not None and player.is_bot


def _next_seat(rnd: RoundState, dropped: dict[str, DropKind]) -> int:
    n = len(rnd.seats)
    idx = rnd.current_player_index
    for _ in range(n):
        idx = (idx + 1) % n
        if rnd.seats[idx] not in dropped:
            return idx
    return rnd.current_player_index


def _new_round(state: GameState, rng: random.Random | None) -> RoundState:
    seats = tuple(state.active_player_ids)
    dealt = deal_round(seats, rng=rng)
    dealer = len(state.round_results) % len(seats)
    return RoundState(
        round_number=len(state.round_results) + 1,
        seats=seats,
        hands=dealt.hands,
        draw_pile=dealt.draw_pile,
        discard_pile=dealt.discard_pile,
        wild_indicator=dealt.wild_indicator,
        dealer_index=dealer,
        current_player_index=first_to_play(dealer, len(seats)),
        discard_history=list(dealt.discard_pile),
    )


def new_game(
    players: Sequence[Player],
    config: GameConfig | None = None,
    rng: random.Random | None = None,
    game_id: str | None = None,
) -> GameState:
    """Seat the players, zero the scores and deal the first round."""
    if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
        raise ValueError(
            f"A game seats {MIN_PLAYERS} to {MAX_PLAYERS} players, got {len(players)}"
        )
    if len({p.id for p in players}) != len(players):
        raise ValueError("Player ids must be unique")
    config = config or GameConfig()
    state = GameState(
        id=game_id or f"practice-{uuid.uuid4().hex[:12]}",
        config=config,
        players=tuple(players),
        scores={p.id: 0 for p in players},
        active_player_ids=tuple(p.id for p in players),
    )
    state = replace(state, current_round=_new_round(state, rng))
    logger.info(
        "New %s game %s with %d players", config.variant.value, state.id, len(players)
    )
    return state


def start_round(state: GameState, rng: random.Random | None = None) -> GameState | None:
    """Deal the next round; only between rounds of a game still in progress."""
    if state.phase != GamePhase.PLAYING:
        return None
    if state.current_round is not None and state.current_round.phase == RoundPhase.PLAYING:
        return None
    if len(state.active_player_ids) < 2:
        return None
    return _with_round(state, _new_round(state, rng))


def draw_card(
    state: GameState,
    player_id: str,
    source: DrawSource,
    rng: random.Random | None = None,
) -> GameState | None:
    """Current player takes a card; the drawn card ends up last in the hand."""
    rnd = _playing_round(state)
    if rnd is None or rnd.turn_phase != TurnPhase.DRAW or rnd.current_player_id != player_id:
        return None

    draw_pile, discard_pile = rnd.draw_pile, rnd.discard_pile
    if DrawSource(source) == DrawSource.DECK:
        if not draw_pile:
            draw_pile, discard_pile = refill_draw_pile(draw_pile, discard_pile, rng)
        card, draw_pile = draw_from_pile(draw_pile)
    else:
        card, discard_pile = draw_from_discard(discard_pile)
    if card is None:
        return None

    hands = {pid: list(h) for pid, h in rnd.hands.items()}
    hands[player_id] = add_card(hands[player_id], card)
    draws = dict(rnd.draws)
    draws[player_id] = draws.get(player_id, 0) + 1
    new_rnd = _copy_round(
        rnd,
        hands=hands,
        draw_pile=list(draw_pile),
        discard_pile=list(discard_pile),
        draws=draws,
        turn_phase=TurnPhase.DISCARD,
        last_action=LastAction(player_id, "draw", card, DrawSource(source)),
    )
    return _with_round(state, new_rnd)


def discard_card(state: GameState, player_id: str, card_id: str) -> GameState | None:
    """Current player throws a card and the turn passes to the next player still in."""
    rnd = _playing_round(state)
    if rnd is None or rnd.turn_phase != TurnPhase.DISCARD or rnd.current_player_id != player_id:
        return None
    card = find_card(rnd.hands[player_id], card_id)
    if card is None:
        return None

    hands = {pid: list(h) for pid, h in rnd.hands.items()}
    hands[player_id] = remove_card(hands[player_id], card_id)
    new_rnd = _copy_round(
        rnd,
        hands=hands,
        discard_pile=push_discard(rnd.discard_pile, card),
        discard_history=[*rnd.discard_history, card],
        current_player_index=_next_seat(rnd, rnd.dropped),
        turn_phase=TurnPhase.DRAW,
        last_action=LastAction(player_id, "discard", card),
    )
    return _with_round(state, new_rnd)


def declare(
    state: GameState,
    player_id: str,
    melds: Sequence[Meld],
    show_card_id: str,
) -> GameState | None:
    """
    Current player, holding 14 cards after a draw, puts ``show_card_id`` down
    and shows the other 13 as ``melds`` (anything not in a meld is shown as
    deadwood). Melds are re-read from the hand by card id, so only the
    player's real cards are judged. The round ends either way; an invalid
    show pays the penalty.
    """
    rnd = _playing_round(state)
    if rnd is None or rnd.turn_phase != TurnPhase.DISCARD or rnd.current_player_id != player_id:
        return None
    hand = rnd.hands[player_id]
    show_card = find_card(hand, show_card_id)
    if show_card is None:
        return None

    if any(not isinstance(m, Meld) for m in melds):
        return None
    shown = remove_card(hand, show_card_id)
    by_id = {c.id: c for c in shown}
    meld_ids = [c.id for m in melds for c in m.cards]
    if len(meld_ids) != len(set(meld_ids)) or not set(meld_ids) <= by_id.keys():
        return None
    melds = [Meld(m.type, tuple(by_id[c.id] for c in m.cards)) for m in melds]
    deadwood = [c for c in shown if c.id not in set(meld_ids)]

    result = validate_declaration(melds, deadwood)
    declaration_type = DeclarationType.VALID if result.is_valid else DeclarationType.INVALID

    hands = {pid: list(h) for pid, h in rnd.hands.items()}
    hands[player_id] = shown
    ended = _copy_round(
        rnd,
        hands=hands,
        discard_pile=push_discard(rnd.discard_pile, show_card),
        last_action=LastAction(player_id, "declare", show_card),
    )
    logger.info(
        "%s declared %s in round %d", player_id, declaration_type.value, rnd.round_number
    )
    return _finish_round(
        state,
        ended,
        winner_id=player_id,
        declaration_type=declaration_type,
        melds=tuple(melds),
        errors=result.errors,
    )


def drop(state: GameState, player_id: str) -> GameState | None:
    """
    Current player gives up the round before drawing. Before their first draw
    it is a first drop, later a middle drop. The penalty is booked when the
    round ends; if only one player is left in, that player wins the round.
    """
    rnd = _playing_round(state)
    if rnd is None or rnd.turn_phase != TurnPhase.DRAW or rnd.current_player_id != player_id:
        return None
    if player_id in rnd.dropped:
        return None

    kind = DropKind.FIRST if rnd.draws.get(player_id, 0) == 0 else DropKind.MIDDLE
    dropped = {**rnd.dropped, player_id: kind}
    new_rnd = _copy_round(
        rnd,
        dropped=dropped,
        last_action=LastAction(player_id, f"drop-{kind.value}"),
    )
    logger.info("%s dropped (%s) in round %d", player_id, kind.value, rnd.round_number)

    still_in = new_rnd.players_in()
    if len(still_in) == 1:
        return _finish_round(
            state,
            new_rnd,
            winner_id=still_in[0],
            declaration_type=kind.declaration_type,
        )
    new_rnd = replace(new_rnd, current_player_index=_next_seat(rnd, dropped))
    return _with_round(state, new_rnd)


def _finish_round(
    state: GameState,
    rnd: RoundState,
    winner_id: str,
    declaration_type: DeclarationType,
    melds: tuple[Meld, ...] = (),
    errors: tuple[str, ...] = (),
) -> GameState:
    config = state.config
    hands = {pid: rnd.hands[pid] for pid in rnd.seats}
    round_scores = calculate_round_scores(
        hands, winner_id, declaration_type, config, dropped=rnd.dropped
    )
    scores = update_cumulative_scores(state.scores, round_scores)
    results = (
        *state.round_results,
        RoundResult(
            round_number=rnd.round_number,
            winner_id=winner_id,
            declaration_type=declaration_type,
            scores=round_scores,
            declared_melds=melds,
            final_hands={pid: list(h) for pid, h in hands.items()},
            errors=tuple(errors),
            winnings=(
                points_rummy_winnings(winner_id, round_scores, config.point_value)
                if config.variant == Variant.POINTS
                else 0.0
            ),
        ),
    )
    player_ids = state.player_ids
    active = tuple(active_players(player_ids, scores, config))
    ended = should_game_end(player_ids, scores, len(results), config)
    winner = determine_game_winner(player_ids, scores, config) if ended else None
    ranks = tuple(player_ranks(player_ids, scores, config)) if ended else ()
    if ended:
        logger.info("Game %s over after %d rounds, winner %s", state.id, len(results), winner)
    return _touch(
        state,
        current_round=replace(rnd, phase=RoundPhase.ENDED),
        round_results=results,
        scores=scores,
        active_player_ids=active,
        phase=GamePhase.ENDED if ended else GamePhase.PLAYING,
        winner_id=winner,
        final_ranks=ranks,
    )


def rejoin(state: GameState, player_id: str) -> GameState | None:
    """Pool only, between rounds: an eliminated player buys back in."""
    if state.phase != GamePhase.PLAYING or state.config.variant != Variant.POOL:
        return None
    if state.current_round is not None and state.current_round.phase == RoundPhase.PLAYING:
        return None
    if not can_rejoin(player_id, state.player_ids, state.scores, state.config):
        return None
    scores = dict(state.scores)
    scores[player_id] = rejoin_score(state.player_ids, state.scores, state.config)
    active = tuple(active_players(state.player_ids, scores, state.config))
    logger.info("%s rejoined at %d", player_id, scores[player_id])
    return _touch(state, scores=scores, active_player_ids=active, rejoins=state.rejoins + 1)


def bot_context_for(
    state: GameState,
    player_id: str,
    rng: random.Random | None = None,
) -> BotContext | None:
    rnd = _playing_round(state)
    if rnd is None or rnd.current_player_id != player_id:
        return None
    config = state.config
    return BotContext(
        hand=list(rnd.hands[player_id]),
        top_discard=top_discard(rnd.discard_pile),
        discard_history=list(rnd.discard_history),
        is_first_turn=rnd.draws.get(player_id, 0) == 0,
        current_score=state.scores.get(player_id, 0),
        pool_limit=config.pool_limit if config.variant == Variant.POOL else None,
        turn_phase=rnd.turn_phase,
        rng=rng or random.Random(),
        first_drop_penalty=config.first_drop_penalty,
        middle_drop_penalty=config.middle_drop_penalty,
    )


def apply_bot_decision(
    state: GameState,
    player_id: str,
    decision: BotDecision,
    rng: random.Random | None = None,
) -> GameState | None:
    """Turn a bot decision into the matching transition."""
    if decision.action == BotAction.DRAW and decision.source is not None:
        return draw_card(state, player_id, decision.source, rng)
    if decision.action == BotAction.DISCARD and decision.card is not None:
        return discard_card(state, player_id, decision.card.id)
    if decision.action == BotAction.DECLARE and decision.card is not None:
        return declare(state, player_id, decision.melds, decision.card.id)
    if decision.action == BotAction.DROP:
        return drop(state, player_id)
    return None


def is_stalemate(state: GameState) -> bool:
    """Draw phase with nothing left to draw and nothing to reshuffle."""
    rnd = _playing_round(state)
    if rnd is None or rnd.turn_phase != TurnPhase.DRAW:
        return False
    return not rnd.draw_pile and len(rnd.discard_pile) <= 1


__all__ = [
    "GamePhase",
    "GameState",
    "LastAction",
    "Player",
    "RoundPhase",
    "RoundResult",
    "RoundState",
    "apply_bot_decision",
    "bot_context_for",
    "current_player_id",
    "declare",
    "discard_card",
    "draw_card",
    "drop",
    "is_bot_turn",
    "is_stalemate",
    "make_players",
    "new_game",
    "rejoin",
    "start_round",
]
