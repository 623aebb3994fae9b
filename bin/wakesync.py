#!/usr/bin/env python3
"""Console front end for the wakesync device controller."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import getpass
import logging
import signal
import sys
from collections.abc import Sequence

from wakesync.controller.app import WakeController
from wakesync.controller.config import ControllerConfig
from wakesync.controller.view import View

LOGGER = logging.getLogger("wakesync")


class ConsoleRenderer:
    """Prints the parts of the view that changed since the last render."""

    def __init__(self, *, show_clock: bool) -> None:
        self._show_clock = show_clock
        self._last_status: str | None = None
        self._last_notice: str | None = None

    def __call__(self, view: View) -> None:
        if view.notice and view.notice != self._last_notice:
            print(f"* {view.notice}", file=sys.stderr, flush=True)
        self._last_notice = view.notice
        if not self._show_clock:
            return
        status = f"{view.clock}  {view.mode or '-'}  next: {view.next_activation}"
        if status != self._last_status:
            self._last_status = status
            print(status, flush=True)


def _confirm_interactive(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _confirm_yes(_prompt: str) -> bool:
    return True


def _print_alarms(view: View) -> None:
    if not view.alarms:
        print(view.alarms_empty_text)
        return
    for row in view.alarms:
        print(f"{row.id:>4}  {row.label:<9}  {row.toggle_label}")


def _print_mode(view: View) -> None:
    print(f"Active mode:     {view.mode or '-'}")
    print(f"Next activation: {view.next_activation}")


def _print_events(view: View) -> None:
    if view.stats:
        print(view.stats)
    if not view.events:
        print(view.events_empty_text)
        return
    for row in view.events:
        print(f"{row.time_str}  {row.type:<7}  {row.mode:<16}  {row.message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Control a wake/sleep scheduling device")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("watch", help="Sync time and follow the device clock and mode")
    sub.add_parser("sync", help="Push the current time to the device")
    sub.add_parser("status", help="Show clock, mode, battery and WiFi")

    alarms = sub.add_parser("alarms", help="Manage explicit wake times")
    alarm_sub = alarms.add_subparsers(dest="alarm_command", required=True)
    alarm_sub.add_parser("list")
    add = alarm_sub.add_parser("add")
    add.add_argument("time", help="HH:MM")
    for name in ("toggle", "delete"):
        cmd = alarm_sub.add_parser(name)
        cmd.add_argument("alarm_id", type=int)

    mode = sub.add_parser("mode", help="Show or change the scheduling mode")
    mode_sub = mode.add_subparsers(dest="mode_command", required=True)
    mode_sub.add_parser("status")
    mode_sub.add_parser("set-times")
    for name in ("regular", "random"):
        cmd = mode_sub.add_parser(name)
        cmd.add_argument("hours")
        cmd.add_argument("minutes")

    events = sub.add_parser("events", help="Show or clear event history")
    events_sub = events.add_subparsers(dest="events_command", required=True)
    events_sub.add_parser("list")
    clear = events_sub.add_parser("clear")
    clear.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    settings = sub.add_parser("settings", help="Show or save display settings")
    settings.add_argument("--time-format", choices=("12", "24"))
    settings.add_argument("--theme")

    wifi = sub.add_parser("wifi", help="Show or change the device access point")
    wifi.add_argument("--ssid")

    sleep = sub.add_parser("sleep", help="Put the device into low-power sleep")
    sleep.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    sub.add_parser("trigger", help="Run a scheduled activation now")
    sub.add_parser("reset-motor", help="Return the feeder carousel to its home compartment")
    return parser


async def _watch(controller: WakeController) -> None:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _handle_signal(signum: int) -> None:
        LOGGER.info("Received signal %s, shutting down", signum)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _handle_signal, sig)

    await controller.start()
    await stop_event.wait()


async def run(args: argparse.Namespace) -> int:
    config = ControllerConfig.from_env()
    confirm = _confirm_yes if getattr(args, "yes", False) else _confirm_interactive
    controller = WakeController(
        config,
        confirm=confirm,
        on_render=ConsoleRenderer(show_clock=args.command == "watch"),
    )
    ok = True
    try:
        ok = await _run_command(controller, args)
    finally:
        await controller.close()
    return 0 if ok else 1


async def _run_command(controller: WakeController, args: argparse.Namespace) -> bool:
    command = args.command
    if command == "watch":
        await _watch(controller)
        return True
    if command == "sync":
        await controller.settings.load()
        return await controller.dispatch("clock.sync")
    if command == "status":
        await controller.settings.load()
        await controller.clock.refresh_display()
        await controller.modes.refresh()
        await controller.device.battery()
        await controller.device.servo()
        await controller.wifi.load()
        view = controller.view()
        print(f"Device time:     {view.clock}")
        _print_mode(view)
        print(f"Battery:         {view.battery or 'unknown'}")
        print(f"Feeder:          {view.servo or 'unknown'}")
        print(f"Access point:    {view.wifi_ssid or 'unknown'}")
        return not controller.state.clock_error
    if command == "alarms":
        await controller.settings.load()
        if args.alarm_command == "list":
            result = await controller.alarms.refresh()
        elif args.alarm_command == "add":
            result = await controller.dispatch("alarm.create", time=args.time)
        else:
            result = await controller.dispatch(f"alarm.{args.alarm_command}", alarm_id=args.alarm_id)
        _print_alarms(controller.view())
        return result is not None
    if command == "mode":
        if args.mode_command == "status":
            result = await controller.modes.refresh()
        elif args.mode_command == "set-times":
            result = await controller.dispatch("mode.set_times")
        else:
            action = "mode.regular_interval" if args.mode_command == "regular" else "mode.random_interval"
            result = await controller.dispatch(action, hours=args.hours, minutes=args.minutes)
        _print_mode(controller.view())
        return result is not None
    if command == "events":
        if args.events_command == "list":
            await controller.dispatch("events.refresh")
            _print_events(controller.view())
            return True
        result = await controller.dispatch("events.clear")
        _print_events(controller.view())
        return result is not None
    if command == "settings":
        if args.time_format is None and args.theme is None:
            settings = await controller.settings.load()
        else:
            current = await controller.settings.load() or controller.state.settings
            settings = await controller.dispatch(
                "settings.save",
                time_format=args.time_format or current.time_format,
                theme=args.theme or current.theme,
            )
        if settings is not None:
            print(f"Time format: {settings.time_format}h")
            print(f"Theme:       {settings.theme}")
        return settings is not None
    if command == "wifi":
        if not args.ssid:
            ssid = await controller.wifi.load()
            print(ssid or "unknown")
            return ssid is not None
        password = getpass.getpass("New WiFi password: ")
        return await controller.dispatch("wifi.save", ssid=args.ssid, password=password)
    if command == "sleep":
        return await controller.dispatch("device.sleep")
    if command == "trigger":
        return await controller.dispatch("device.trigger")
    if command == "reset-motor":
        ok = await controller.dispatch("device.reset_motor")
        print(controller.view().servo or "unknown")
        return ok
    raise ValueError(f"Unhandled command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    with contextlib.suppress(BrokenPipeError):
        sys.exit(main())
