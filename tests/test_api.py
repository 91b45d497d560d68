"""End-to-end tests for the REST API."""

from datetime import datetime, timedelta

import pytest

from backend.config import utcnow


async def _create_user(client, email: str = "learner@example.com") -> int:
    response = await client.post("/api/users", json={"email": email, "nickname": "learner"})
    assert response.status_code == 201
    return response.json()["id"]


async def _create_deck(client, user_id: int, name: str = "Spanish") -> int:
    response = await client.post("/api/decks", json={"user_id": user_id, "name": name})
    assert response.status_code == 201
    return response.json()["id"]


async def _add_card(client, deck_id: int, front: str, back: str, memo: str = "") -> dict:
    response = await client.post(
        f"/api/decks/{deck_id}/cards", json={"front": front, "back": back, "memo": memo}
    )
    assert response.status_code == 201
    return response.json()


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_get_update(self, client) -> None:
        user_id = await _create_user(client)
        response = await client.patch(
            f"/api/users/{user_id}", json={"nickname": "polyglot", "phone_number": "010-1234-5678"}
        )
        assert response.status_code == 200

        body = (await client.get(f"/api/users/{user_id}")).json()
        assert body["nickname"] == "polyglot"
        assert body["phone_number"] == "010-1234-5678"
        assert body["email"] == "learner@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client) -> None:
        await _create_user(client)
        response = await client.post(
            "/api/users", json={"email": "learner@example.com", "nickname": "again"}
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_email_and_phone(self, client) -> None:
        bad_email = await client.post("/api/users", json={"email": "nope", "nickname": "x"})
        assert bad_email.status_code == 422
        bad_phone = await client.post(
            "/api/users",
            json={"email": "x@example.com", "nickname": "x", "phone_number": "12345"},
        )
        assert bad_phone.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_user(self, client) -> None:
        assert (await client.get("/api/users/999")).status_code == 404


class TestDecksAndCards:
    @pytest.mark.asyncio
    async def test_deck_crud(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)

        listed = (await client.get("/api/decks", params={"user_id": user_id})).json()
        assert [d["id"] for d in listed] == [deck_id]

        response = await client.patch(f"/api/decks/{deck_id}", json={"description": "Daily words"})
        assert response.json()["description"] == "Daily words"
        assert response.json()["name"] == "Spanish"

        assert (await client.delete(f"/api/decks/{deck_id}")).status_code == 204
        assert (await client.get(f"/api/decks/{deck_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_deck_requires_existing_user(self, client) -> None:
        response = await client.post("/api/decks", json={"user_id": 42, "name": "Orphan"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_blank_deck_name(self, client) -> None:
        user_id = await _create_user(client)
        response = await client.post("/api/decks", json={"user_id": user_id, "name": "   "})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_card_crud(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        card = await _add_card(client, deck_id, "hola", "hello", memo="greeting")
        assert card["interval"] == 0.0
        assert card["ease_factor"] == 2.5
        assert card["review_count"] == 0

        response = await client.patch(f"/api/cards/{card['id']}", json={"back": "hi"})
        assert response.status_code == 200
        assert response.json()["back"] == "hi"
        assert response.json()["front"] == "hola"

        cards = (await client.get(f"/api/decks/{deck_id}/cards")).json()
        assert len(cards) == 1

        assert (await client.delete(f"/api/cards/{card['id']}")).status_code == 204
        assert (await client.get(f"/api/cards/{card['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_card_requires_front_and_back(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        response = await client.post(f"/api/decks/{deck_id}/cards", json={"front": "hola"})
        assert response.status_code == 422
        response = await client.post(
            f"/api/decks/{deck_id}/cards", json={"front": " ", "back": "hello"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_blank_card_edit_rejected(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        card = await _add_card(client, deck_id, "hola", "hello")
        response = await client.patch(f"/api/cards/{card['id']}", json={"front": "  "})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_card_in_unknown_deck(self, client) -> None:
        response = await client.post("/api/decks/77/cards", json={"front": "a", "back": "b"})
        assert response.status_code == 404


class TestStudyFlow:
    @pytest.mark.asyncio
    async def test_full_session(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        first = await _add_card(client, deck_id, "hola", "hello")
        second = await _add_card(client, deck_id, "adiós", "goodbye")

        start = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id}
        )
        assert start.status_code == 200
        session_id = start.json()["session_id"]
        assert start.json()["total_cards"] == 2
        assert start.json()["due_cards"] == 2

        current = (await client.get(f"/api/study/next/{session_id}")).json()
        assert current["card_id"] == first["id"]
        assert current["remaining"] == 2
        assert current["interval_preview"] == {"again": 0.0, "hard": 1.0, "good": 3.0, "easy": 7.0}

        before = utcnow()
        answer = await client.post(
            f"/api/study/answer/{session_id}", json={"card_id": first["id"], "rating": "good"}
        )
        assert answer.status_code == 200
        body = answer.json()
        assert body["interval"] == 3.0
        assert body["ease_factor"] == 2.5
        assert body["review_count"] == 1
        assert body["remaining"] == 1
        assert not body["session_complete"]
        due = datetime.fromisoformat(body["next_review_date"])
        assert before + timedelta(days=3) <= due <= utcnow() + timedelta(days=3)

        answer = await client.post(
            f"/api/study/answer/{session_id}", json={"card_id": second["id"], "rating": "again"}
        )
        assert answer.json()["ease_factor"] == pytest.approx(2.3)
        assert answer.json()["session_complete"]

        assert (await client.get(f"/api/study/next/{session_id}")).status_code == 410

        stats = (await client.get(f"/api/study/stats/{session_id}")).json()
        assert stats == {
            "cards_reviewed": 2,
            "again": 1,
            "hard": 0,
            "good": 1,
            "easy": 0,
            "remaining": 0,
        }

        end = await client.post(f"/api/study/end/{session_id}")
        assert end.json() == {"status": "ended", "cards_reviewed": 2, "record_saved": True}
        assert (await client.get(f"/api/study/stats/{session_id}")).status_code == 404

        stored = (await client.get(f"/api/cards/{first['id']}")).json()
        assert stored["interval"] == 3.0
        assert stored["review_count"] == 1

        records = (await client.get(f"/api/records/{user_id}")).json()
        assert len(records) == 1
        assert records[0]["cards_studied"] == 2
        assert records[0]["again"] == 1
        assert records[0]["good"] == 1

        today = utcnow().date()
        monthly = await client.get(
            f"/api/records/{user_id}", params={"year": today.year, "month": today.month}
        )
        assert len(monthly.json()) == 1

    @pytest.mark.asyncio
    async def test_next_shows_current_card_content(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        first = await _add_card(client, deck_id, "hola", "hello")
        second = await _add_card(client, deck_id, "gato", "cat")
        start = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id}
        )
        session_id = start.json()["session_id"]

        await client.patch(f"/api/cards/{first['id']}", json={"back": "hi", "memo": "informal"})
        current = (await client.get(f"/api/study/next/{session_id}")).json()
        assert current["back"] == "hi"
        assert current["memo"] == "informal"

        await client.delete(f"/api/cards/{first['id']}")
        current = (await client.get(f"/api/study/next/{session_id}")).json()
        assert current["card_id"] == second["id"]
        assert current["remaining"] == 1

    @pytest.mark.asyncio
    async def test_invalid_rating(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        card = await _add_card(client, deck_id, "hola", "hello")
        start = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id}
        )
        session_id = start.json()["session_id"]

        response = await client.post(
            f"/api/study/answer/{session_id}", json={"card_id": card["id"], "rating": "perfect"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_card_mismatch(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        await _add_card(client, deck_id, "hola", "hello")
        other = await _add_card(client, deck_id, "gato", "cat")
        start = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id}
        )
        session_id = start.json()["session_id"]

        response = await client.post(
            f"/api/study/answer/{session_id}", json={"card_id": other["id"], "rating": "good"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_deck_and_unknown_session(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        start = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id}
        )
        assert start.status_code == 404
        assert (await client.get("/api/study/next/nope")).status_code == 404
        assert (await client.post("/api/study/end/nope")).status_code == 404

    @pytest.mark.asyncio
    async def test_max_cards_limits_session(self, client) -> None:
        user_id = await _create_user(client)
        deck_id = await _create_deck(client, user_id)
        for i in range(5):
            await _add_card(client, deck_id, f"front {i}", f"back {i}")
        start = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id, "max_cards": 3}
        )
        assert start.json()["total_cards"] == 3

        bad = await client.post(
            "/api/study/start", params={"deck_id": deck_id, "user_id": user_id, "max_cards": 0}
        )
        assert bad.status_code == 422

    @pytest.mark.asyncio
    async def test_records_need_year_and_month_together(self, client) -> None:
        user_id = await _create_user(client)
        response = await client.get(f"/api/records/{user_id}", params={"year": 2024})
        assert response.status_code == 422
