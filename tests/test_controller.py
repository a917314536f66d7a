from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from todolist.client.api_client import TodoApiClient, TodoApiError
from todolist.client.controller import BackendStatus, Source, TodoController
from todolist.client.local_cache import LocalCache
from todolist.client.view import TodoFilter


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def _server_error(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"detail": {"code": "service_unavailable", "use_local_cache": True}})


def _controller(transport: httpx.AsyncBaseTransport, cache: LocalCache, confirm=lambda _m: True) -> TodoController:
    api = TodoApiClient("http://todo.test", transport=transport)
    return TodoController(api, cache, confirm=confirm)


async def _script(controller: TodoController) -> None:
    """Same user actions for both the online and the offline run."""

    await controller.load()
    for text in ("walk dog", "  pay rent ", "water plants"):
        await controller.add(text)
    ids = {todo["text"]: todo["id"] for todo in controller.todos}
    await controller.toggle(ids["pay rent"], True)
    await controller.toggle(ids["walk dog"], True)
    await controller.toggle(ids["walk dog"], False)
    await controller.edit(ids["water plants"], " water all plants ")
    await controller.add("temporary")
    temp_id = next(t["id"] for t in controller.todos if t["text"] == "temporary")
    await controller.delete(temp_id)
    await controller.clear_completed()
    await controller.api.aclose()


def _end_state(todos) -> list[tuple[str, bool]]:
    return sorted((t["text"], bool(t["completed"])) for t in todos)


def test_offline_fallback_matches_store_end_state(api_app, repo, tmp_path: Path) -> None:
    online_cache = LocalCache.at(tmp_path / "online.json")
    online = _controller(httpx.ASGITransport(app=api_app), online_cache)
    asyncio.run(_script(online))

    offline_cache = LocalCache.at(tmp_path / "offline.json")
    offline = _controller(httpx.MockTransport(_refuse), offline_cache)
    asyncio.run(_script(offline))

    expected = [("walk dog", False), ("water all plants", False)]
    assert _end_state(repo.list()) == expected
    assert _end_state(offline_cache.get_all()) == expected
    assert _end_state(online.todos) == expected
    assert _end_state(offline.todos) == expected

    assert online.last_source is Source.SERVICE
    assert offline.last_source is Source.CACHE
    assert online_cache.get_all() == []


def test_http_error_status_also_falls_back(tmp_path: Path) -> None:
    cache = LocalCache.at(tmp_path / "cache.json")
    controller = _controller(httpx.MockTransport(_server_error), cache)

    view = asyncio.run(controller.add("offline item"))
    assert controller.last_source is Source.CACHE
    assert [t["text"] for t in view.items] == ["offline item"]
    assert isinstance(view.items[0]["id"], str)


def test_service_is_retried_after_recovery(api_app, tmp_path: Path) -> None:
    cache = LocalCache.at(tmp_path / "cache.json")
    state = {"up": False}
    asgi = httpx.ASGITransport(app=api_app)

    class FlakyTransport(httpx.AsyncBaseTransport):
        async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
            if not state["up"]:
                raise httpx.ConnectError("down", request=request)
            return await asgi.handle_async_request(request)

    controller = _controller(FlakyTransport(), cache)

    async def run() -> None:
        await controller.add("while down")
        assert controller.last_source is Source.CACHE
        state["up"] = True
        await controller.add("after recovery")
        assert controller.last_source is Source.SERVICE
        await controller.api.aclose()

    asyncio.run(run())
    # The offline record stays in the cache and is never re-submitted.
    assert [t["text"] for t in cache.get_all()] == ["while down"]
    assert {t["text"] for t in controller.todos} == {"while down", "after recovery"}


def test_blank_text_sends_no_request(tmp_path: Path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(500)

    cache = LocalCache.at(tmp_path / "cache.json")
    controller = _controller(httpx.MockTransport(handler), cache)

    asyncio.run(controller.add("   "))
    asyncio.run(controller.edit("1", ""))
    assert seen == []
    assert cache.get_all() == []


def test_declined_confirmation_skips_destructive_ops(tmp_path: Path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    cache = LocalCache.at(tmp_path / "cache.json")
    kept = cache.append({"text": "keep me", "completed": True})
    prompts: list[str] = []

    def decline(message: str) -> bool:
        prompts.append(message)
        return False

    controller = _controller(httpx.MockTransport(handler), cache, confirm=decline)
    asyncio.run(controller.delete(kept["id"]))
    asyncio.run(controller.clear_completed())

    assert len(prompts) == 2
    assert seen == []
    assert cache.get_all() == [kept]


def test_filter_reloads_and_counts_use_full_list(api_app, tmp_path: Path) -> None:
    controller = _controller(httpx.ASGITransport(app=api_app), LocalCache.at(tmp_path / "c.json"))

    async def run():
        await controller.add("open")
        await controller.add("closed")
        closed = next(t for t in controller.todos if t["text"] == "closed")
        await controller.toggle(closed["id"], True)
        view = await controller.set_filter("active")
        await controller.api.aclose()
        return view

    view = asyncio.run(run())
    assert view.todo_filter is TodoFilter.ACTIVE
    assert [t["text"] for t in view.items] == ["open"]
    assert view.pending_count == 1
    assert view.has_completed is True


def test_check_connection(api_app, tmp_path: Path) -> None:
    cache = LocalCache.at(tmp_path / "c.json")
    up = _controller(httpx.ASGITransport(app=api_app), cache)
    down = _controller(httpx.MockTransport(_refuse), cache)

    assert asyncio.run(up.check_connection()) is BackendStatus.CONNECTED
    assert asyncio.run(down.check_connection()) is BackendStatus.OFFLINE


def test_api_client_reports_status_code() -> None:
    async def run():
        async with TodoApiClient("http://todo.test", transport=httpx.MockTransport(_server_error)) as api:
            await api.list_todos()

    with pytest.raises(TodoApiError) as info:
        asyncio.run(run())
    assert info.value.status_code == 503
    assert info.value.detail["detail"]["use_local_cache"] is True
