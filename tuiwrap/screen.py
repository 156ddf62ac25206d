"""The Screen cell matrix, and the Surface applications draw into."""

from __future__ import annotations

__all__ = [
    "Screen",
    "Surface",
]


class ChangeBuffer:
    """A simple class that keeps track of x, y positions of changed characters."""

    def __init__(self) -> None:
        self._data: dict[tuple[int, int], str] = {}

    def __setitem__(self, indices: tuple[int, int], value: str) -> None:
        self._data[indices] = value

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        """Clears the buffer."""

        self._data.clear()

    def gather(self) -> list[tuple[tuple[int, int], str]]:
        """Gathers all changes, ordered top-to-bottom then left-to-right.

        Returns:
            A list of items in the format:

                (x, y), changed_str

        """

        items: list[tuple[tuple[int, int], str]] = [*self._data.items()]
        return sorted(items, key=lambda item: (item[0][1], item[0][0]))


class Screen:
    """A matrix of cells that represents a 'screen'.

    This matrix keeps track of changes between each draw, so only the newest changes
    are written to the terminal. This helps eliminate full-screen redraws.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cursor: tuple[int, int] = (0, 0),
        fillchar: str = " ",
    ) -> None:
        self._cells: list[list[str]] = []
        self._change_buffer = ChangeBuffer()

        self.cursor: tuple[int, int] = cursor

        self.resize((width, height), fillchar)

    @property
    def size(self) -> tuple[int, int]:
        """Returns the (width, height) of the matrix."""

        return self.width, self.height

    def resize(
        self, size: tuple[int, int], fillchar: str = " ", keep_original: bool = True
    ) -> None:
        """Resizes the cell matrix to a new size.

        Every cell is registered as a change, so the next render repaints the screen.

        Args:
            size: The new size.
            fillchar: The character used for cells that didn't exist before.
            keep_original: If set, the overlapping part of the old matrix is kept.
        """

        width, height = size
        self._change_buffer.clear()

        cells = [[fillchar] * width for _ in range(height)]

        if keep_original:
            for y, row in enumerate(self._cells[:height]):
                cells[y][: min(width, len(row))] = row[:width]

        for y, row in enumerate(cells):
            for x, char in enumerate(row):
                self._change_buffer[x, y] = char

        self.width = width
        self.height = height

        self._cells = cells

    def clear(self, fillchar: str = " ") -> None:
        """Clears the screen's entire matrix.

        Only cells that don't already hold `fillchar` are registered as changes, so
        clearing at the start of every frame stays cheap.

        Args:
            fillchar: The character to fill the matrix with.
        """

        for y, row in enumerate(self._cells):
            for x, char in enumerate(row):
                if char != fillchar:
                    row[x] = fillchar
                    self._change_buffer[x, y] = fillchar

        self.cursor = (0, 0)

    def write(
        self,
        text: str,
        cursor: tuple[int, int] | None = None,
        force_overwrite: bool = False,
    ) -> int:
        """Writes text to the screen at the given cursor position.

        Text wraps onto the next line when it reaches the right edge, and a newline
        continues from the starting column of the following line. Anything past the
        bottom edge is dropped.

        Args:
            text: The text to write.
            cursor: The location of the screen to start writing at, anchored to the
                top-left. If not given, the screen's last used cursor is used.
            force_overwrite: If set, each of the characters written will be registered
                as a change.

        Returns:
            The number of cells that have been updated as a result of the write.
        """

        start_x, y = cursor if cursor is not None else self.cursor
        x = start_x
        changes = 0

        for char in text:
            if char == "\n":
                x, y = start_x, y + 1
                continue

            if not (0 <= x < self.width and 0 <= y < self.height):
                break

            if force_overwrite or self._cells[y][x] != char:
                self._cells[y][x] = char
                self._change_buffer[x, y] = char
                changes += 1

            x += 1

            if x >= self.width:
                x, y = 0, y + 1

        self.cursor = (x, y)

        return changes

    def render(self, origin: tuple[int, int] = (0, 0), redraw: bool = False) -> str:
        """Collects all buffered changes and returns them as a single string.

        Args:
            origin: The offset to apply to all positions.
            redraw: If set, every row is written, not just the changed cells.
        """

        x, y = origin

        if redraw:
            buffer = ""

            for row in self._cells:
                buffer += f"\x1b[{y};{x}H" + "".join(row)
                y += 1

            self._change_buffer.clear()

            return buffer

        buffer = ""

        previous_x = None
        previous_y = None

        for (x, y), char in self._change_buffer.gather():
            x += origin[0]
            y += origin[1]

            if previous_x is not None and (x == previous_x + 1 and y == previous_y):
                buffer += char
            else:
                buffer += f"\x1b[{y};{x}H{char}"

            previous_x, previous_y = x, y

        self._change_buffer.clear()

        return buffer


class Surface:
    """The drawable frame handed to an application once per loop iteration.

    It covers the whole terminal. Writes go into the terminal's screen and are only
    sent to the device once the frame is committed.
    """

    def __init__(self, screen: Screen) -> None:
        self._screen = screen

    @property
    def size(self) -> tuple[int, int]:
        """Returns the (width, height) of the frame, in cells."""

        return self._screen.size

    @property
    def width(self) -> int:
        return self._screen.width

    @property
    def height(self) -> int:
        return self._screen.height

    def write(self, text: str, cursor: tuple[int, int] | None = None) -> int:
        """Writes text at the given cell. See `Screen.write`."""

        return self._screen.write(text, cursor=cursor)

    def clear(self, fillchar: str = " ") -> None:
        """Fills the whole frame with `fillchar`."""

        self._screen.clear(fillchar)
