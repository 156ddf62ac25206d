import logging
import os
from argparse import ArgumentParser

from . import UI, KeyEvent, Surface, Terminal, get_env_flag
from .__about__ import __version__

QUIT_KEYS = ("q", "ctrl-c")


class EventsApp:
    """Shows every key it receives, until `q` or `ctrl-c` is pressed."""

    def __init__(self) -> None:
        self.history: list[str] = []
        self.done = False

    def render(self, surface: Surface) -> None:
        surface.clear()
        surface.write("Press keys to see their names, q to quit.", cursor=(0, 0))

        visible = self.history[-(surface.height - 2) :] if surface.height > 2 else []

        for i, name in enumerate(visible, start=2):
            surface.write(name, cursor=(2, i))

    def handle_input(self, event: KeyEvent) -> None:
        if event in QUIT_KEYS:
            self.done = True
            return

        self.history.append(" | ".join(map(repr, event.key)))

    def should_terminate(self) -> bool:
        return self.done


class ClockApp:
    """Counts intervals, until `q` or `ctrl-c` is pressed."""

    def __init__(self) -> None:
        self.ticks = 0
        self.done = False

    def render(self, surface: Surface) -> None:
        surface.clear()
        surface.write(f"Ticks: {self.ticks}", cursor=(0, 0))
        surface.write("q to quit", cursor=(0, 1))

    def handle_input(self, event: KeyEvent) -> None:
        self.done = event in QUIT_KEYS

    def should_terminate(self) -> bool:
        return self.done

    def on_interval(self) -> None:
        self.ticks += 1


def run_events() -> None:
    with UI(EventsApp()) as ui:
        ui.run()


def run_clock(interval: float) -> None:
    app = ClockApp()

    with UI.ticked(app, interval) as ui:
        ui.run_ticked()

    print(f"{app.ticks} ticks in {ui.frames} frames.")


def run_size() -> None:
    print(" x ".join(map(str, Terminal().size)))


def run_debug() -> None:
    terminal = Terminal()

    rows = [
        ("Environment:", ""),
        ("$TERM", os.getenv("TERM", "-")),
        ("$TUIWRAP_REPORT_MOUSE", os.getenv("TUIWRAP_REPORT_MOUSE", "-")),
        ("$TUIWRAP_LOG_LEVEL", os.getenv("TUIWRAP_LOG_LEVEL", "-")),
        ("Terminal state:", ""),
        ("size", "x".join(map(str, terminal.size))),
        ("isatty", str(terminal.isatty)),
        ("mouse reporting", str(get_env_flag("TUIWRAP_REPORT_MOUSE", True))),
    ]

    max_left = max(len(row[0]) for row in rows) + 3
    max_right = max(len(row[1]) for row in rows) + 3

    buff = ""

    for left, right in rows:
        if right == "":
            if buff:
                buff += "\n"

            buff += left + "\n"
            continue

        buff += f"{left:<{max_left}}{right:>{max_right}}\n"

    print(buff.rstrip("\n"))


def main() -> None:
    """The main entrypoint."""

    parser = ArgumentParser("tuiwrap", description="Try out the tuiwrap run loop.")
    parser.add_argument("-v", "--version", action="version", version=__version__)
    parser.add_argument(
        "--log-file", help="Write logs to this file. The terminal is busy with the UI."
    )

    subs = parser.add_subparsers(required=True)

    subs.add_parser("events").set_defaults(func=run_events)

    clock_command = subs.add_parser("clock")
    clock_command.set_defaults(func=run_clock)
    clock_command.add_argument("--interval", type=float, default=1.0)

    subs.add_parser("size").set_defaults(func=run_size)
    subs.add_parser("debug").set_defaults(func=run_debug)

    args = parser.parse_args()

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=os.getenv("TUIWRAP_LOG_LEVEL", "WARNING").upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    opts = vars(args)
    command = opts.pop("func")
    del opts["log_file"]

    command(**opts)


if __name__ == "__main__":
    main()
