"""
Rummy shoe: two standard 52-card decks plus 2 printed jokers each (108 cards).
Card values: A/J/Q/K = 10, 2..10 = face value, any joker = 0.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum


class Suit(IntEnum):
    """Spades, Hearts, Diamonds, Clubs. Order used when sorting a hand by suit."""
    SPADES = 0
    HEARTS = 1
    DIAMONDS = 2
    CLUBS = 3


class JokerType(str, Enum):
    NONE = "none"
    PRINTED = "printed"
    WILD = "wild"


# Rank in a suit: 1=Ace (low by default), 2..10, 11=Jack, 12=Queen, 13=King
RANK_ACE = 1
RANK_JACK = 11
RANK_QUEEN = 12
RANK_KING = 13
ACE_HIGH_INDEX = 14

RANKS = tuple(range(1, 14))
CARDS_PER_PLAYER = 13
PRINTED_JOKERS_PER_DECK = 2
DECKS_IN_SHOE = 2
SHOE_SIZE = DECKS_IN_SHOE * (52 + PRINTED_JOKERS_PER_DECK)

RANK_LABELS = {1: "A", 11: "J", 12: "Q", 13: "K"}
SUIT_SYMBOLS = "♠♥♦♣"
SUIT_LETTERS = "SHDC"


def rank_label(rank: int) -> str:
    return RANK_LABELS.get(rank) or str(rank)


def rank_index(rank: int, ace_high: bool = False) -> int:
    """Ordinal of a rank inside a sequence; the ace counts 14 when played high."""
    if rank == RANK_ACE and ace_high:
        return ACE_HIGH_INDEX
    return rank


def face_value(rank: int) -> int:
    """Point value of a natural card of this rank."""
    if rank == RANK_ACE or rank >= RANK_JACK:
        return 10
    return rank


@dataclass(frozen=True)
class Card:
    """
    A single card of the shoe.

    ``id`` is unique across the 108 cards, so two physical copies of the same
    suit/rank stay distinguishable. A natural card becomes a wild joker once
    the wild indicator is known (see ``promote_to_wild``); printed jokers carry
    a placeholder suit and rank that play no role in meld checks.
    """

    id: str
    suit: Suit
    rank: int
    joker_type: JokerType = JokerType.NONE
    value: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.rank <= 13:
            raise ValueError(f"Rank out of range: {self.rank}")
        if self.joker_type != JokerType.NONE and self.value != 0:
            raise ValueError(f"Jokers are worth 0 points, got {self.value}")

    def is_joker(self) -> bool:
        """True for printed jokers and for wild jokers."""
        return self.joker_type != JokerType.NONE

    def is_printed_joker(self) -> bool:
        return self.joker_type == JokerType.PRINTED

    def is_wild(self) -> bool:
        return self.joker_type == JokerType.WILD

    def promote_to_wild(self) -> "Card":
        """Same physical card acting as a wild joker (value reset to 0)."""
        if self.is_printed_joker():
            return self
        return replace(self, joker_type=JokerType.WILD, value=0)

    def __str__(self) -> str:
        if self.is_printed_joker():
            return "JK"
        label = f"{rank_label(self.rank)}{SUIT_SYMBOLS[self.suit]}"
        return f"{label}*" if self.is_wild() else label

    def __repr__(self) -> str:
        return str(self)


def make_card(suit: Suit, rank: int, deck_index: int = 0) -> Card:
    return Card(
        id=f"{suit.name.lower()}-{rank_label(rank)}-{deck_index}",
        suit=suit,
        rank=rank,
        value=face_value(rank),
    )


def make_printed_joker(deck_index: int = 0, number: int = 0) -> Card:
    return Card(
        id=f"joker-{deck_index}-{number}",
        suit=Suit.SPADES,
        rank=RANK_ACE,
        joker_type=JokerType.PRINTED,
        value=0,
    )


def make_deck(deck_index: int = 0) -> list[Card]:
    """One 54-card deck: 52 natural cards followed by its printed jokers."""
    deck: list[Card] = []
    for s in Suit:
        for rank in RANKS:
            deck.append(make_card(s, rank, deck_index))
    for n in range(PRINTED_JOKERS_PER_DECK):
        deck.append(make_printed_joker(deck_index, n))
    return deck


def make_shoe() -> list[Card]:
    """Full 108-card shoe (Indian Rummy always plays with two decks)."""
    shoe: list[Card] = []
    for i in range(DECKS_IN_SHOE):
        shoe.extend(make_deck(i))
    return shoe


def cards_point_total(cards: list[Card]) -> int:
    return sum(c.value for c in cards)


def card_display(card: Card) -> tuple[str, str]:
    """(symbol, colour) pair for presentation layers."""
    if card.is_printed_joker():
        return "JOKER", "red"
    colour = "red" if card.suit in (Suit.HEARTS, Suit.DIAMONDS) else "black"
    return f"{rank_label(card.rank)}{SUIT_SYMBOLS[card.suit]}", colour


def parse_card(text: str, deck_index: int = 0) -> Card:
    """
    Parse short card text: rank then suit letter or symbol, e.g. "10S", "QH",
    "A♦", "7c". "JK" (or "JOKER") is a printed joker. A trailing "*" marks a
    wild joker ("5D*").
    """
    raw = text.strip().upper()
    if raw in ("JK", "JOKER"):
        return make_printed_joker(deck_index)
    wild = raw.endswith("*")
    if wild:
        raw = raw[:-1]
    if len(raw) < 2:
        raise ValueError(f"Cannot parse card: {text!r}")
    rank_part, suit_part = raw[:-1], raw[-1]
    if suit_part in SUIT_LETTERS:
        suit = Suit(SUIT_LETTERS.index(suit_part))
    elif suit_part in SUIT_SYMBOLS:
        suit = Suit(SUIT_SYMBOLS.index(suit_part))
    else:
        raise ValueError(f"Unknown suit in card: {text!r}")
    by_label = {v: k for k, v in RANK_LABELS.items()}
    if rank_part in by_label:
        rank = by_label[rank_part]
    elif rank_part.isdigit() and 2 <= int(rank_part) <= 10:
        rank = int(rank_part)
    else:
        raise ValueError(f"Unknown rank in card: {text!r}")
    card = make_card(suit, rank, deck_index)
    return card.promote_to_wild() if wild else card


def parse_hand(text: str) -> list[Card]:
    """
    Parse a whitespace separated list of cards. Repeated cards get increasing
    deck indices so ids stay unique (the second "5H" is the other deck's copy).
    """
    cards: list[Card] = []
    seen: dict[str, int] = {}
    for token in text.split():
        key = token.upper().rstrip("*")
        idx = seen.get(key, 0)
        seen[key] = idx + 1
        card = parse_card(token, deck_index=idx % DECKS_IN_SHOE)
        if card.is_printed_joker():
            if idx >= DECKS_IN_SHOE * PRINTED_JOKERS_PER_DECK:
                raise ValueError("A shoe holds only 4 printed jokers")
            card = make_printed_joker(idx % DECKS_IN_SHOE, idx // DECKS_IN_SHOE)
        elif idx >= DECKS_IN_SHOE:
            raise ValueError(f"More than {DECKS_IN_SHOE} copies of {token!r}")
        cards.append(card)
    return cards
