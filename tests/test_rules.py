from __future__ import annotations

from prose_engine.buffer import Buffer
from prose_engine.config import ProseConfig
from prose_engine.modes import ModeContext, ProseMode
from prose_engine.rules import (
    RuleContext,
    break_line,
    fill_lines,
    fill_paragraph,
    generic_fill,
    indent_line,
    justify_line,
)


def make_mode(text: str, **overrides: object) -> ProseMode:
    config = ProseConfig().with_overrides(**overrides)
    mode = ProseMode(ModeContext(buffer=Buffer.from_text(text)), config=config)
    mode.on_enter()
    return mode


def test_prose_continuation_copies_previous_indentation() -> None:
    mode = make_mode("  Hello there\nworld\n")

    cursor = indent_line(mode.rules, 14)

    assert mode.buffer.text == "  Hello there\n  world\n"
    assert cursor == 16
    assert mode.prose_lines() == (True, True, False)


def test_prose_opener_keeps_its_indentation() -> None:
    mode = make_mode("   Opening words\n")

    assert indent_line(mode.rules, 0) == 0
    assert mode.buffer.text == "   Opening words\n"


def test_code_body_indents_by_offset() -> None:
    mode = make_mode("(defun f ()\nbody)\n")

    cursor = indent_line(mode.rules, 12)

    assert mode.buffer.text == "(defun f ()\n  body)\n"
    assert cursor == 14


def test_code_aligns_after_nested_opener() -> None:
    mode = make_mode("((lambda (x) x)\n1)\n")

    indent_line(mode.rules, 16)

    assert mode.buffer.text == "((lambda (x) x)\n 1)\n"


def test_code_aligns_inside_vector() -> None:
    mode = make_mode("[a b\nc]\n")

    indent_line(mode.rules, 5)

    assert mode.buffer.text == "[a b\n c]\n"


def test_top_level_code_moves_to_column_zero() -> None:
    mode = make_mode("(a)\n   (b)\n")

    cursor = indent_line(mode.rules, 4)

    assert mode.buffer.text == "(a)\n(b)\n"
    assert cursor == 4


def test_line_inside_string_is_left_alone() -> None:
    text = '(f "abc\ndef")\n'
    mode = make_mode(text)

    assert indent_line(mode.rules, 8) == 8
    assert mode.buffer.text == text


def test_fill_prose_paragraph() -> None:
    mode = make_mode("The quick brown fox jumps over\nthe lazy dog.\n", fill_column=20)

    assert fill_paragraph(mode.rules, 3) is True

    assert mode.buffer.text == "The quick brown fox\njumps over the lazy\ndog.\n"
    assert mode.prose_lines() == (True, True, True, False)


def test_fill_keeps_paragraph_indentation() -> None:
    mode = make_mode("  alpha beta gamma delta\n  epsilon\n", fill_column=16)

    fill_paragraph(mode.rules, 0)

    assert mode.buffer.text == "  alpha beta\n  gamma delta\n  epsilon\n"


def test_fill_reports_unchanged_paragraph() -> None:
    mode = make_mode("short words\n")

    assert fill_paragraph(mode.rules, 0) is False


def test_fill_on_separator_does_nothing() -> None:
    mode = make_mode("one\n\ntwo\n")

    assert fill_paragraph(mode.rules, 4) is False


def test_fill_in_code_only_touches_comment_block() -> None:
    mode = make_mode("(foo)\n;; one two three four five six\n", fill_column=16)

    assert fill_paragraph(mode.rules, 8) is True

    assert mode.buffer.text == "(foo)\n;; one two three\n;; four five six\n"


def test_fill_in_code_outside_comment_is_noop() -> None:
    text = "(foo bar baz qux quux corge grault)\n"
    mode = make_mode(text, fill_column=10)

    assert fill_paragraph(mode.rules, 2) is False
    assert mode.buffer.text == text


def test_justify_pads_all_but_last_line() -> None:
    mode = make_mode("aa bb cc dd ee\n", fill_column=10)

    fill_paragraph(mode.rules, 0, justify=True)

    assert mode.buffer.text == "aa  bb  cc\ndd ee\n"


def test_hard_newlines_split_fill_chunks() -> None:
    mode = make_mode("one\ntwo\nthree\n", use_hard_newlines=True)
    mode.buffer.mark_soft_newline(3)

    fill_paragraph(mode.rules, 0)

    assert mode.buffer.text == "one two\nthree\n"
    assert mode.buffer.soft_newlines() == ()


def test_without_hard_newlines_whole_paragraph_joins() -> None:
    mode = make_mode("one\ntwo\nthree\n")

    fill_paragraph(mode.rules, 0)

    assert mode.buffer.text == "one two three\n"


def test_prose_fill_bypasses_override() -> None:
    calls: list[tuple[int, int, bool]] = []

    def override(ctx: RuleContext, start: int, end: int, justify: bool) -> bool:
        calls.append((start, end, justify))
        return True

    mode = ProseMode(
        ModeContext(buffer=Buffer.from_text("one\ntwo\n")),
        config=ProseConfig(),
        fill_override=override,
    )
    mode.on_enter()

    fill_paragraph(mode.rules, 0)
    assert mode.buffer.text == "one two\n"
    assert calls == []

    assert generic_fill(mode.rules, 0, 7) is True
    assert calls == [(0, 7, False)]


def test_fill_lines_and_justify_line_helpers() -> None:
    assert fill_lines(["  "], width=10, initial_indent="  ") == [""]
    assert fill_lines(["a b", "c"], width=3) == ["a b", "c"]
    assert justify_line("ab cd", "", 9) == "ab     cd"
    assert justify_line("single", "", 20) == "single"


def test_break_prose_line_drops_surrounding_blanks() -> None:
    mode = make_mode("Hello world\n")

    cursor = break_line(mode.rules, 5)

    assert mode.buffer.text == "Hello\nworld\n"
    assert cursor == 6
    assert mode.prose_lines() == (True, True, False)


def test_break_prose_line_keeps_indentation() -> None:
    mode = make_mode("  Hello world\n")

    cursor = break_line(mode.rules, 7)

    assert mode.buffer.text == "  Hello\n  world\n"
    assert cursor == 10


def test_soft_break_is_remembered() -> None:
    mode = make_mode("Hello world\n")

    break_line(mode.rules, 5, soft=True)

    assert mode.buffer.soft_newlines() == (5,)
    assert mode.buffer.is_soft_newline(5)


def test_break_code_line_indents_new_line() -> None:
    mode = make_mode("(foo bar)\n")

    cursor = break_line(mode.rules, 4)

    assert mode.buffer.text == "(foo\n  bar)\n"
    assert cursor == 7
    assert mode.prose_lines() == (False, False, False)
