"""CLI-level smoke tests."""
import pytest

from rummy.cli import _cmd_simulate, build_parser, main

READY = "AS 2S 3S 5H 6H JK 9C 9D 9H KS KH KD KC"


class _Args:
    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


def test_arrange_ready_hand(capsys):
    main(["arrange", READY])
    out = capsys.readouterr().out
    assert "Ready to declare." in out
    assert "pure-sequence" in out


def test_arrange_fourteen_cards_names_the_discard(capsys):
    main(["arrange", READY + " 8D"])
    assert "Discard 8♦ and declare." in capsys.readouterr().out


def test_arrange_prints_hints(capsys):
    main(["arrange", "AS 2S JK 5H 6H JK 9C 9D 9H KS KH KD KC"])
    assert "pure sequence" in capsys.readouterr().out


def test_arrange_rejects_garbage():
    with pytest.raises(SystemExit):
        main(["arrange", "ZZ 2S"])


def test_deal_is_reproducible(capsys):
    main(["deal", "--players", "3", "--seed", "7"])
    first = capsys.readouterr().out
    main(["deal", "--players", "3", "--seed", "7"])
    assert capsys.readouterr().out == first
    assert "Wild joker" in first
    assert first.count("deadwood") == 3


def test_deal_rejects_table_size():
    with pytest.raises(SystemExit):
        main(["deal", "--players", "7"])


def test_simulate_command(capsys):
    args = _Args(games=2, bots=["easy", "medium"], variant="points", pool_limit=101, deals=2, seed=0)
    _cmd_simulate(args)
    out = capsys.readouterr().out
    assert "/2 games completed" in out
    assert "bot-1 (easy)" in out


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_deal_accepts_a_full_table(capsys):
    main(["deal", "--players", "6", "--seed", "1"])
    assert capsys.readouterr().out.count("deadwood") == 6
