"""13-card Indian Rummy rules and bot engine (pool, points and deals variants)."""

__version__ = "0.1.0"

from .deck import Card, JokerType, Suit, make_deck, make_shoe, parse_card, parse_hand
from .deal import DealResult, DrawSource, TurnPhase, deal_round, refill_draw_pile, shuffle
from .meld import (
    Meld,
    MeldType,
    create_meld,
    get_meld_type,
    is_pure_sequence,
    is_valid_sequence,
    is_valid_set,
)
from .arrangement import HandAnalysis, auto_arrange_hand, can_declare, find_declaration
from .declaration import DeclarationResult, validate_declaration
from .config import GameConfig, Variant
from .scoring import (
    DeclarationType,
    DropKind,
    calculate_round_scores,
    determine_game_winner,
    is_player_eliminated,
    should_game_end,
    update_cumulative_scores,
)
from .agents import BotAction, BotContext, BotDecision, Difficulty, get_bot_decision
from .game import (
    GamePhase,
    GameState,
    Player,
    RoundPhase,
    RoundResult,
    RoundState,
    declare,
    discard_card,
    draw_card,
    drop,
    new_game,
    rejoin,
    start_round,
)
from .scheduler import BotTurnScheduler
from .session import PracticeSession
