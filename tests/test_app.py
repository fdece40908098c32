"""
Labyrinth Tests - HTTP Application Tests.

Tests for the cell, room, search, auth and page routes, including the
login gate, status codes and redirects.
"""

from urllib.parse import parse_qs, urlsplit

import pytest
from httpx import ASGITransport, AsyncClient

from labyrinth.app import create_app
from labyrinth.domain.entities import Cell, Source
from labyrinth.repositories import InMemoryCellRepository

from .conftest import TEST_PASSWORD


def count_card_links(html: str) -> int:
    start = html.index('<ul class="card-link-list">Links')
    end = html.index("</ul> <!--links-->")
    return html[start:end].count('<li class="card-link">')


class TestViewCell:
    """Viewing a card."""

    def test_existing_cell(self, client, seeded_ids):
        response = client.get(f"/cell/{seeded_ids[0]}")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "The Library of Babel" in response.text
        assert count_card_links(response.text) == 2

    def test_unknown_cell(self, client):
        response = client.get("/cell/thiscelldoesnotexist")

        assert response.status_code == 404
        assert "Lost in the labyrinth" in response.text

    def test_edit_links_hidden_when_anonymous(self, client, stored_cell_id):
        response = client.get(f"/cell/{stored_cell_id}")
        assert f"/cell/{stored_cell_id}/edit" not in response.text

    def test_edit_links_shown_when_logged_in(self, auth_client, stored_cell_id):
        response = auth_client.get(f"/cell/{stored_cell_id}")
        assert f"/cell/{stored_cell_id}/edit" in response.text


class TestCreateCell:
    """Creating a new card."""

    def test_with_proper_information(self, auth_client, repository):
        response = auth_client.post(
            "/newCell",
            data={
                "room": "This is a room",
                "title": "The new cell",
                "body": "This is the new cell I'm creating",
                "source": "Confucius",
            },
        )

        assert response.status_code == 302
        cell_id = response.headers["location"].removeprefix("/cell/")
        cell = repository.get_cell(cell_id)
        assert cell.title == "The new cell"
        assert cell.sources == [Source("Confucius")]

    def test_multiple_and_blank_sources(self, auth_client, repository):
        response = auth_client.post(
            "/newCell",
            data={"room": "r", "title": "t", "body": "b", "source": ["Confucius", " ", "Mencius"]},
        )

        assert response.status_code == 302
        (cell,) = repository.search_cells("t")
        assert cell.sources == [Source("Confucius"), Source("Mencius")]

    @pytest.mark.parametrize("missing", ["body", "room", "title"])
    def test_without_required_field(self, auth_client, repository, missing):
        data = {"room": "This is a room", "title": "The new cell", "body": "A body", "source": "Confucius"}
        data[missing] = ""

        response = auth_client.post("/newCell", data=data)

        assert response.status_code == 400
        assert "Error when creating card" in response.text
        assert repository.count() == 0

    def test_requires_login(self, client, repository):
        response = client.post("/newCell", data={"room": "r", "title": "t", "body": "b"})

        assert response.status_code == 302
        assert response.headers["location"] == "/login?next=/new"
        assert repository.count() == 0

    def test_new_cell_form(self, auth_client):
        response = auth_client.get("/new?room=Garden")
        assert response.status_code == 200
        assert 'value="Garden"' in response.text


class TestUpdateCell:
    """Updating a card."""

    def test_with_proper_information(self, auth_client, repository, stored_cell_id):
        response = auth_client.post(
            "/save",
            data={
                "cellId": stored_cell_id,
                "room": "This is a room",
                "title": "Updated title",
                "body": "I'm updating this cell",
            },
        )

        assert response.status_code == 302
        assert response.headers["location"] == f"/cell/{stored_cell_id}"
        assert repository.get_cell(stored_cell_id).title == "Updated title"

    def test_with_wrong_information(self, auth_client, repository, stored_cell_id):
        response = auth_client.post(
            "/save",
            data={"cellId": stored_cell_id, "room": "  ", "title": "Updated title", "body": "  "},
        )

        assert response.status_code == 400
        cell = repository.get_cell(stored_cell_id)
        assert cell.title == "The new cell"
        assert cell.room == "This is a room"

    def test_unknown_cell(self, auth_client):
        response = auth_client.post(
            "/save", data={"cellId": "missing", "room": "r", "title": "t", "body": "b"}
        )
        assert response.status_code == 404

    def test_edit_page_requires_login(self, client, stored_cell_id):
        response = client.get(f"/cell/{stored_cell_id}/edit")

        assert response.status_code == 302
        assert response.headers["location"] == f"/login?next=/cell/{stored_cell_id}/edit"

    def test_edit_page(self, auth_client, stored_cell_id):
        response = auth_client.get(f"/cell/{stored_cell_id}/edit")
        assert response.status_code == 200
        assert "The new cell" in response.text

    def test_edit_page_unknown_cell(self, auth_client):
        assert auth_client.get("/cell/missing/edit").status_code == 404


class TestSources:
    """Adding and removing sources."""

    def test_sources_page(self, auth_client, stored_cell_id):
        response = auth_client.get(f"/cell/{stored_cell_id}/sources")
        assert response.status_code == 200
        assert "Confucius" in response.text

    def test_add_source(self, auth_client, repository, stored_cell_id):
        response = auth_client.post(f"/cell/{stored_cell_id}/sources/add", data={"source": "Mencius"})

        assert response.status_code == 302
        assert response.headers["location"] == f"/cell/{stored_cell_id}/sources"
        assert repository.get_cell(stored_cell_id).sources == [Source("Confucius"), Source("Mencius")]

    def test_add_blank_source(self, auth_client, stored_cell_id):
        response = auth_client.post(f"/cell/{stored_cell_id}/sources/add", data={"source": "  "})
        assert response.status_code == 400

    def test_add_source_to_unknown_cell(self, auth_client):
        response = auth_client.post("/cell/missing/sources/add", data={"source": "Mencius"})
        assert response.status_code == 404

    def test_remove_source(self, auth_client, repository, stored_cell_id):
        response = auth_client.post(f"/cell/{stored_cell_id}/sources/remove", data={"source": "Confucius"})

        assert response.status_code == 302
        assert repository.get_cell(stored_cell_id).sources == []

    def test_remove_padded_source(self, auth_client, repository, stored_cell_id):
        auth_client.post(f"/cell/{stored_cell_id}/sources/add", data={"source": " Mencius "})

        response = auth_client.post(f"/cell/{stored_cell_id}/sources/remove", data={"source": " Mencius "})

        assert response.status_code == 302
        assert repository.get_cell(stored_cell_id).sources == [Source("Confucius")]

    def test_remove_source_from_unknown_cell(self, auth_client):
        response = auth_client.post("/cell/missing/sources/remove", data={"source": "Confucius"})
        assert response.status_code == 404

    def test_add_source_requires_login(self, client, repository, stored_cell_id):
        response = client.post(f"/cell/{stored_cell_id}/sources/add", data={"source": "Mencius"})

        assert response.status_code == 302
        assert response.headers["location"].startswith("/login")
        assert repository.get_cell(stored_cell_id).sources == [Source("Confucius")]


class TestLinks:
    """Linking and unlinking cells."""

    @pytest.fixture
    def other_id(self, repository):
        return repository.new_cell(Cell(title="Other", body="Other body", room="Room"))

    def test_links_page(self, auth_client, repository, stored_cell_id, other_id):
        repository.link_cells(stored_cell_id, other_id)

        response = auth_client.get(f"/cell/{stored_cell_id}/links")

        assert response.status_code == 200
        assert "Other" in response.text

    def test_link_cells(self, auth_client, repository, stored_cell_id, other_id):
        response = auth_client.post(f"/cell/{stored_cell_id}/links/add", data={"cellToLink": other_id})

        assert response.status_code == 302
        assert response.headers["location"] == f"/cell/{stored_cell_id}/links"
        assert repository.get_cell(stored_cell_id).links == {other_id}
        assert repository.get_cell(other_id).links == {stored_cell_id}

    def test_self_link_redirects_without_linking(self, auth_client, repository, stored_cell_id):
        response = auth_client.post(f"/cell/{stored_cell_id}/links/add", data={"cellToLink": stored_cell_id})

        assert response.status_code == 302
        assert repository.get_cell(stored_cell_id).links == set()

    def test_link_unknown_cell_redirects(self, auth_client, repository, stored_cell_id):
        response = auth_client.post(f"/cell/{stored_cell_id}/links/add", data={"cellToLink": "missing"})

        assert response.status_code == 302
        assert repository.get_cell(stored_cell_id).links == set()

    def test_unlink_cells(self, auth_client, repository, stored_cell_id, other_id):
        repository.link_cells(stored_cell_id, other_id)

        response = auth_client.post(f"/cell/{stored_cell_id}/links/remove", data={"cellToUnlink": other_id})

        assert response.status_code == 302
        assert repository.get_cell(stored_cell_id).links == set()
        assert repository.get_cell(other_id).links == set()


class TestSearch:
    """Searching sources, rooms and cells."""

    def test_search_sources(self, client, seeded_ids):
        response = client.get("/search/sources?term=Confu")

        assert response.status_code == 200
        assert response.json() == ["Confucius"]

    def test_search_rooms(self, client, seeded_ids):
        response = client.get("/search/rooms?term=Habita")

        assert response.status_code == 200
        assert response.json() == ["Habitación"]

    def test_search_cells(self, client, repository, seeded_ids):
        response = client.get("/search/cells?term=territory")

        assert response.status_code == 200
        results = response.json()
        assert len(results) == 1
        assert results[0]["value"] == seeded_ids[2]
        assert results[0]["label"].startswith("The map is not the territory: ")

    def test_search_without_matches(self, client, seeded_ids):
        assert client.get("/search/sources?term=zzz").json() == []


class TestRooms:
    """Room listing and room view."""

    def test_rooms_page(self, client, seeded_ids):
        response = client.get("/rooms")

        assert response.status_code == 200
        assert "Habitación" in response.text
        assert "Models" in response.text

    def test_room_page(self, client, seeded_ids):
        response = client.get("/room/Models")

        assert response.status_code == 200
        assert "The map is not the territory" in response.text
        assert "The Library of Babel" not in response.text

    def test_unknown_room(self, client):
        response = client.get("/room/Nowhere")

        assert response.status_code == 404
        assert "Room not found: Nowhere" in response.text


class TestAuth:
    """The login gate."""

    def test_login_page(self, client):
        response = client.get("/login")
        assert response.status_code == 200
        assert 'name="password"' in response.text

    def test_login_with_wrong_password(self, client):
        response = client.post("/login", data={"password": "wrong"})

        assert response.status_code == 401
        assert "have access!" in response.text
        assert "lob-session" not in response.cookies

    def test_login_redirects_to_next(self, client):
        response = client.post("/login", data={"password": TEST_PASSWORD, "next": "/new"})

        assert response.status_code == 302
        assert response.headers["location"] == "/new"
        assert "lob-session" in response.cookies

    def test_login_ignores_external_next(self, client):
        response = client.post("/login", data={"password": TEST_PASSWORD, "next": "//evil.example"})
        assert response.headers["location"] == "/rooms"

    def test_logout(self, auth_client, stored_cell_id):
        response = auth_client.post("/logout")
        assert response.status_code == 302

        response = auth_client.get(f"/cell/{stored_cell_id}/edit")
        assert response.status_code == 302

    def test_forged_cookie_is_rejected(self, client, stored_cell_id):
        client.cookies.set("lob-session", "not-a-token")
        assert client.get(f"/cell/{stored_cell_id}/edit").status_code == 302

    def test_gated_post_returns_to_editor_after_login(self, client, stored_cell_id):
        response = client.post(f"/cell/{stored_cell_id}/sources/add", data={"source": "Mencius"})
        next_path = parse_qs(urlsplit(response.headers["location"]).query)["next"][0]
        assert next_path == f"/cell/{stored_cell_id}/sources"

        response = client.post("/login", data={"password": TEST_PASSWORD, "next": next_path})
        assert response.status_code == 302

        response = client.get(response.headers["location"])
        assert response.status_code == 200
        assert "Confucius" in response.text

    def test_gated_post_returns_to_local_referer(self, client, stored_cell_id):
        response = client.post(
            "/save",
            data={"cellId": stored_cell_id, "room": "r", "title": "t", "body": "b"},
            headers={"Referer": f"http://testserver/cell/{stored_cell_id}/edit"},
        )

        next_path = parse_qs(urlsplit(response.headers["location"]).query)["next"][0]
        assert next_path == f"/cell/{stored_cell_id}/edit"

    def test_gated_post_ignores_external_referer(self, client, stored_cell_id):
        response = client.post(
            "/save",
            data={"cellId": stored_cell_id, "room": "r", "title": "t", "body": "b"},
            headers={"Referer": "http://evil.example/cell/x/edit"},
        )
        assert response.headers["location"] == "/login?next=/rooms"

    def test_gated_get_keeps_query_string(self, client):
        response = client.get("/new?room=Garden")
        next_path = parse_qs(urlsplit(response.headers["location"]).query)["next"][0]
        assert next_path == "/new?room=Garden"

        response = client.post("/login", data={"password": TEST_PASSWORD, "next": next_path})
        assert response.headers["location"] == "/new?room=Garden"

        response = client.get(response.headers["location"])
        assert response.status_code == 200
        assert 'value="Garden"' in response.text

    def test_auth_disabled(self, test_settings):
        from fastapi.testclient import TestClient

        repository = InMemoryCellRepository()
        cell_id = repository.new_cell(Cell(title="t", body="b", room="r"))
        settings = test_settings.model_copy(update={"AUTH_DISABLED": True})

        with TestClient(create_app(settings=settings, repository=repository)) as client:
            assert client.get(f"/cell/{cell_id}/edit").status_code == 200


class TestPagesAndHealth:
    """Static pages, health, metrics and middleware."""

    def test_homepage_redirects_to_rooms(self, client):
        response = client.get("/")
        assert response.status_code == 302
        assert response.headers["location"] == "/rooms"

    def test_static_page(self, client):
        response = client.get("/page/about.html")
        assert response.status_code == 200
        assert "About the labyrinth" in response.text

    @pytest.mark.parametrize("page", ["missing.html", "..%2Fconfig.py"])
    def test_missing_page(self, client, page):
        assert client.get(f"/page/{page}").status_code == 404

    def test_health(self, client, stored_cell_id):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "labyrinth", "cells": 1}

    def test_metrics(self, client):
        client.get("/rooms")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "lob_http_requests_total" in response.text

    def test_request_id_is_echoed(self, client):
        response = client.get("/rooms", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_static_cache_headers(self, client):
        response = client.get("/static/style.css")
        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "public, max-age=86400"


@pytest.mark.asyncio
async def test_async_view_and_search(app, seeded_ids) -> None:
    """
    Test the app over ASGITransport.

    Verifies a card view and a search through an async client.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(f"/cell/{seeded_ids[1]}")
        assert response.status_code == 200
        assert "Learning without thought" in response.text

        response = await client.get("/search/sources", params={"term": "analects"})
        assert response.json() == ["The Analects"]
