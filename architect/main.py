#!/usr/bin/env python3
"""
Command line launcher for the Architect factory.
Runs build cycles until stopped, or lists recently stored projects.
"""
from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from datetime import datetime
from typing import Optional, Sequence

from architect.core.exceptions import ArchitectError
from architect.core.factory import build_driver, build_record_store, validate_credentials
from architect.settings import Settings, get_settings
from architect.utils.logging import configure_logging, get_logger
from architect.utils.schemas import LogEvent

LOGGER = get_logger(__name__)

# Colors for terminal output
CYAN = "\033[96m"
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
MAGENTA = "\033[95m"
GREY = "\033[90m"
RESET = "\033[0m"

KIND_COLORS = {
    "agent": CYAN,
    "success": GREEN,
    "error": RED,
    "warning": YELLOW,
    "system": MAGENTA,
}


def print_event(event: LogEvent) -> None:
    stamp = datetime.fromisoformat(event.timestamp).astimezone().strftime("%H:%M:%S")
    color = KIND_COLORS.get(event.kind, RESET)
    print(f"{GREY}[{stamp}]{RESET} {color}{event.message}{RESET}", flush=True)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="architect", description="Autonomous app-idea factory")
    parser.add_argument("--cycles", type=int, default=None, help="stop after N completed cycles")
    parser.add_argument("--delay", type=float, default=None, help="seconds to wait between cycles")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="use the offline mock LLM and an in-memory record store",
    )
    parser.add_argument(
        "--list",
        dest="list_limit",
        nargs="?",
        const=10,
        default=None,
        metavar="N",
        help="print the N most recent stored projects and exit",
    )
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    updates = {}
    if args.mock:
        updates.update(llm_mode="mock", store_mode="memory")
    if args.delay is not None:
        updates["cycle_delay_seconds"] = args.delay
    return settings.model_copy(update=updates) if updates else settings


async def list_projects(settings: Settings, limit) -> int:
    store = build_record_store(settings)
    try:
        projects = await store.list_projects(limit)
    finally:
        await store.aclose()

    if not projects:
        print("No projects stored yet.")
    for project in projects:
        when = (
            datetime.fromtimestamp(project.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
            if project.timestamp
            else "-"
        )
        print(f"{when}  {project.name}  [{project.stack or '?'}]")
    return 0


async def run_factory(settings: Settings, max_cycles: Optional[int]) -> int:
    validate_credentials(settings)
    store = build_record_store(settings)
    driver = build_driver(settings, sink=print_event, store=store)

    def on_signal() -> None:
        # First signal lets a cycle that is already building finish, a second one cancels it
        if driver.stop_event.is_set():
            driver.request_stop(cancel=True)
        else:
            print(
                f"{YELLOW}🛑 Stopping: a cycle already building will finish and be saved "
                f"(Ctrl+C again to abort)...{RESET}"
            )
            driver.request_stop()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still raises
            pass

    try:
        report = await driver.start(max_cycles=max_cycles)
    except asyncio.CancelledError:
        print(f"{YELLOW}🛑 Factory interrupted.{RESET}")
        return 130
    finally:
        await store.aclose()

    LOGGER.info("Factory exited: %s", report.model_dump())
    return 1 if report.reason == "failed" else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = resolve_settings(args)
    configure_logging(settings.log_level)

    try:
        if args.list_limit is not None:
            return asyncio.run(list_projects(settings, args.list_limit))
        return asyncio.run(run_factory(settings, args.cycles))
    except ArchitectError as exc:
        print(f"{RED}💥 {exc}{RESET}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
