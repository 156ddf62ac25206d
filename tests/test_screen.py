from tuiwrap import Screen, Surface


def test_screen_resize():
    screen = Screen(10, 10)

    screen.write("X", cursor=(9, 9))

    screen.resize((15, 15))

    assert screen._cells[9][9] == "X"
    assert screen.size == (15, 15)

    screen.resize((5, 5))

    assert screen._cells == [[" "] * 5 for _ in range(5)]


def test_screen_clear():
    screen = Screen(10, 10)

    screen.clear(fillchar="X")

    assert all(all(cell == "X" for cell in row) for row in screen._cells)
    assert screen.cursor == (0, 0)


def test_screen_clear_only_registers_differences():
    screen = Screen(5, 5)
    screen.render()

    screen.write("ab", cursor=(1, 1))
    screen.render()

    screen.clear()

    assert screen.render() == "\x1b[1;1H  "


def test_screen_write():
    screen = Screen(10, 10)

    changes = screen.write("X")
    assert screen.cursor == (1, 0)
    assert changes == 1

    changes = screen.write("Xabc", cursor=(0, 0))
    assert changes == 3

    changes = screen.write("OOB", cursor=(10, 10))
    assert changes == 0

    changes = screen.write("X", cursor=(0, 0), force_overwrite=True)
    assert changes == 1


def test_screen_write_wraps_and_newlines():
    screen = Screen(4, 3)

    screen.write("abcdef", cursor=(2, 0))
    assert screen._cells[0] == [" ", " ", "a", "b"]
    assert screen._cells[1] == ["c", "d", "e", "f"]

    screen.clear()
    screen.write("ab\ncd", cursor=(1, 1))
    assert screen._cells[1] == [" ", "a", "b", " "]
    assert screen._cells[2] == [" ", "c", "d", " "]

    assert screen.write("past the bottom", cursor=(0, 2)) == 4


def test_screen_render():
    screen = Screen(5, 5, fillchar="X")

    assert screen.render() == (
        "\x1b[0;0HXXXXX"
        + "\x1b[1;0HXXXXX"
        + "\x1b[2;0HXXXXX"
        + "\x1b[3;0HXXXXX"
        + "\x1b[4;0HXXXXX"
    )

    screen.write("Y", cursor=(4, 4))

    assert screen.render() == "\x1b[4;4HY"
    assert screen.render() == ""

    output = screen.render(origin=(1, 1), redraw=True)

    assert output == (
        "\x1b[1;1HXXXXX"
        + "\x1b[2;1HXXXXX"
        + "\x1b[3;1HXXXXX"
        + "\x1b[4;1HXXXXX"
        + "\x1b[5;1HXXXXY"
    ), repr(output)


def test_surface_wraps_screen():
    screen = Screen(6, 2)
    surface = Surface(screen)

    assert surface.size == (6, 2)
    assert (surface.width, surface.height) == (6, 2)

    assert surface.write("hello", cursor=(1, 1)) == 5
    assert screen._cells[1] == [" ", "h", "e", "l", "l", "o"]

    surface.clear("-")
    assert screen._cells[0] == ["-"] * 6
