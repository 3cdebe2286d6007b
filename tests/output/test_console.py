"""Tests for Rich Console factory and theme."""

from io import StringIO

from grpcwiz.output.console import WIZ_THEME, capture, create_console, get_output


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold red]hello[/bold red]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120

    def test_highlight_disabled(self) -> None:
        console = create_console()
        console.print("value=42")
        assert "\x1b" not in get_output(console)


class TestGetOutput:
    def test_extracts_printed_text(self) -> None:
        console = create_console(no_color=True)
        console.print("hello world")
        assert "hello world" in get_output(console)

    def test_empty_console(self) -> None:
        assert get_output(create_console()) == ""


class TestTheme:
    def test_theme_styles_render(self) -> None:
        console = create_console(no_color=True)
        console.print("[wiz.service]PeopleService[/wiz.service] [wiz.rpc]GetById[/wiz.rpc]")
        assert "PeopleService GetById" in get_output(console)

    def test_theme_defines_status_styles(self) -> None:
        for name in ("wiz.ok", "wiz.error", "wiz.warning", "wiz.path"):
            assert name in WIZ_THEME.styles


class TestCapture:
    def test_returns_drawn_text(self) -> None:
        assert capture(lambda console: console.print("[wiz.ok]OK[/wiz.ok] done")) == "OK done\n"

    def test_width(self) -> None:
        seen: list[int] = []
        capture(lambda console: seen.append(console.width), width=60)
        assert seen == [60]
