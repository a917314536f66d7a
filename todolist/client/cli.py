from __future__ import annotations

import argparse
import asyncio
from typing import Callable, List, Optional

from todolist.app.config import get_settings
from todolist.app.core.logging_config import configure_logging
from todolist.client.api_client import TodoApiClient
from todolist.client.controller import BackendStatus, TodoController
from todolist.client.local_cache import LocalCache
from todolist.client.view import TodoFilter, render_lines


def _prompt(message: str) -> bool:
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="todolist", description="Todo list client with offline fallback.")
    parser.add_argument("--api-url", default=settings.todo_api_url)
    parser.add_argument("--cache", default=settings.todo_cache_path, help="local fallback file")
    parser.add_argument("--filter", choices=[f.value for f in TodoFilter], default=TodoFilter.ALL.value)
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="show tasks")
    sub.add_parser("health", help="check the backend")

    add = sub.add_parser("add", help="create a task")
    add.add_argument("text", nargs="+")

    for name, help_text in (("done", "mark a task completed"), ("undo", "mark a task pending")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("id")

    edit = sub.add_parser("edit", help="change a task's text")
    edit.add_argument("id")
    edit.add_argument("text", nargs="+")

    rm = sub.add_parser("rm", help="delete a task")
    rm.add_argument("id")
    rm.add_argument("-y", "--yes", action="store_true")

    clear = sub.add_parser("clear", help="delete all completed tasks")
    clear.add_argument("-y", "--yes", action="store_true")
    return parser


async def _run(args: argparse.Namespace, confirm: Callable[[str], bool]) -> int:
    cache = LocalCache.at(args.cache)
    async with TodoApiClient(args.api_url) as api:
        controller = TodoController(api, cache, confirm=confirm)
        status = await controller.check_connection()
        if args.command == "health":
            print(f"backend: {status.value}")
            return 0 if status is BackendStatus.CONNECTED else 1
        if status is BackendStatus.OFFLINE:
            print("backend offline: changes are kept in the local cache only")

        await controller.set_filter(args.filter)
        command = args.command or "list"
        if command == "add":
            view = await controller.add(" ".join(args.text))
        elif command == "done":
            view = await controller.toggle(args.id, True)
        elif command == "undo":
            view = await controller.toggle(args.id, False)
        elif command == "edit":
            view = await controller.edit(args.id, " ".join(args.text))
        elif command == "rm":
            view = await controller.delete(args.id)
        elif command == "clear":
            view = await controller.clear_completed()
        else:
            view = controller.view

    for line in render_lines(view):
        print(line)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)
    yes = getattr(args, "yes", False)
    confirm = (lambda _message: True) if yes else _prompt
    return asyncio.run(_run(args, confirm))


if __name__ == "__main__":
    raise SystemExit(main())
