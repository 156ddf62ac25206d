from time import monotonic

from tuiwrap import UI, KeyEvent, Surface


class Stopwatch:
    """Space starts and stops, r resets, q quits."""

    def __init__(self) -> None:
        self.elapsed = 0.0
        self.started_at: float | None = None
        self.done = False

    def render(self, surface: Surface) -> None:
        surface.clear()

        text = f"{self.elapsed:8.1f}s"
        x = max(0, (surface.width - len(text)) // 2)

        surface.write(text, cursor=(x, surface.height // 2))
        surface.write("space: start/stop  r: reset  q: quit", cursor=(0, 0))

    def handle_input(self, event: KeyEvent) -> None:
        if event in ("q", "ctrl-c"):
            self.done = True

        elif event == "space" and self.started_at is None:
            self.started_at = monotonic()

        elif event == "space":
            self.on_interval()
            self.started_at = None

        elif event == "r":
            self.elapsed = 0.0
            self.started_at = monotonic() if self.started_at is not None else None

    def on_interval(self) -> None:
        if self.started_at is None:
            return

        now = monotonic()
        self.elapsed += now - self.started_at
        self.started_at = now

    def should_terminate(self) -> bool:
        return self.done


if __name__ == "__main__":
    with UI.ticked(Stopwatch(), 0.1) as ui:
        ui.run_ticked()
