"""Tests for CLI commands (non-interactive paths plus a scripted review)."""

import argparse
import sys

import pytest

from backend.database import async_session
from backend.services import card_service, study_record_service
from memodeck.__main__ import (
    cmd_add,
    cmd_add_deck,
    cmd_decks,
    cmd_due,
    cmd_review,
    ensure_db,
    ensure_user,
    main,
)


@pytest.mark.asyncio
async def test_ensure_db(db_ready) -> None:
    """Database tables can be created."""
    await ensure_db()


@pytest.mark.asyncio
async def test_ensure_user(db_ready) -> None:
    """Default user is created on first call."""
    await ensure_db()
    user_id = await ensure_user()
    assert user_id >= 1

    # Second call returns same ID
    user_id2 = await ensure_user()
    assert user_id2 == user_id


@pytest.mark.asyncio
async def test_add_deck_and_cards(db_ready, capsys) -> None:
    await cmd_add_deck(argparse.Namespace(name="Japanese", description=""))
    assert "Created deck 'Japanese' (id=1)" in capsys.readouterr().out

    await cmd_add(argparse.Namespace(deck_id=1, front="neko", back="cat", memo=""))
    await cmd_add(argparse.Namespace(deck_id=1, front="inu", back="dog", memo="animal"))
    assert "Added card 2" in capsys.readouterr().out

    await cmd_decks(argparse.Namespace())
    listing = capsys.readouterr().out
    assert "Japanese" in listing

    await cmd_due(argparse.Namespace(deck_id=None))
    assert "2 cards due" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_add_to_missing_deck(db_ready, capsys) -> None:
    await cmd_add(argparse.Namespace(deck_id=9, front="a", back="b", memo=""))
    assert "No deck with id 9" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_scripted_review(db_ready, capsys, monkeypatch) -> None:
    await cmd_add_deck(argparse.Namespace(name="Japanese", description=""))
    await cmd_add(argparse.Namespace(deck_id=1, front="neko", back="cat", memo=""))
    await cmd_add(argparse.Namespace(deck_id=1, front="inu", back="dog", memo=""))

    # reveal, rate Good; reveal, invalid key then Again
    answers = iter(["", "3", "", "x", "1"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(answers))

    await cmd_review(argparse.Namespace(deck_id=1, max_cards=10, reverse=False))
    out = capsys.readouterr().out
    assert "Session Complete!" in out
    assert "Reviewed: 2  Again: 1  Hard: 0  Good: 1  Easy: 0" in out

    async with async_session() as db:
        cards = await card_service.list_cards(db, 1)
        assert [c.review_count for c in cards] == [1, 1]
        assert cards[0].interval == 3.0
        user_id = await ensure_user()
        records = await study_record_service.get_all_records(db, user_id)
        assert records[0].cards_studied == 2


def test_no_command_prints_help(monkeypatch, capsys) -> None:
    monkeypatch.setattr(sys, "argv", ["memodeck"])
    main()
    assert "usage: memodeck" in capsys.readouterr().out
