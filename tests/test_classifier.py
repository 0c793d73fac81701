from __future__ import annotations

from typing import Tuple

from prose_engine.buffer import Document
from prose_engine.classifier import (
    ParagraphClassifier,
    iter_paragraphs,
    paragraph_bounds,
    prose_line_flags,
)
from prose_engine.syntax import BoundaryPredicate, NestingOracle
from prose_engine.tags import Tag, TagStore

PS = Tag.PARAGRAPH_START
NTN = Tag.NON_TERMINATING_NEWLINE


def make_classifier(text: str) -> Tuple[Document, TagStore, ParagraphClassifier]:
    document = Document(text)
    tags = TagStore()
    classifier = ParagraphClassifier(
        document,
        tags,
        boundary=BoundaryPredicate(document),
        oracle=NestingOracle(document, tags),
    )
    return document, tags, classifier


def classify(text: str) -> Tuple[Document, TagStore, ParagraphClassifier]:
    document, tags, classifier = make_classifier(text)
    classifier.classify_document()
    return document, tags, classifier


def test_mixed_document_scenario() -> None:
    text = "(foo)\n\nPlain text here.\n\nNot quite ) balanced.\n"
    document, tags, _ = classify(text)

    first = text.index("Plain")
    second = text.index("Not")
    assert tags.snapshot() == {
        first: PS,
        text.index("\n", first): NTN,
        second: PS,
        text.index("\n", second): NTN,
    }
    assert prose_line_flags(document, tags) == (False, False, True, False, True, False)


def test_lines_inside_open_expression_stay_code() -> None:
    _, tags, _ = classify('(defun f ()\n  "doc"\n  body)\n')

    assert tags.snapshot() == {}


def test_no_newline_mark_on_final_offset() -> None:
    _, tags, _ = classify("Just prose")

    assert tags.snapshot() == {0: PS}


def test_code_openers_on_first_line() -> None:
    text = "x\n\n(a)\n\n`(b)\n\n`\n\n;; c\n\n[1 2]\n\n`foo\n"
    document, tags, _ = classify(text)

    assert prose_line_flags(document, tags) == (
        True, False,  # x
        False, False,  # (a)
        False, False,  # `(b)
        False, False,  # `
        False, False,  # ;; c
        False, False,  # [1 2]
        True, False,  # `foo
    )


def test_indented_opener_at_depth_zero_is_prose() -> None:
    text = "(foo)\n\n  Indented prose.\n"
    _, tags, _ = classify(text)

    assert tags.has(text.index("Indented"), PS)


def test_indented_opener_inside_expression_is_code() -> None:
    text = "(progn\n\n  some words\n  more)\n"
    document, tags, _ = classify(text)

    assert tags.snapshot() == {}
    assert prose_line_flags(document, tags) == (False, False, False, False, False)


def test_unindented_opener_ignores_depth() -> None:
    text = "(progn\n\nsome words)\n"
    _, tags, _ = classify(text)

    assert tags.has(text.index("some"), PS)


def test_continuation_inherits_prose() -> None:
    text = "Prose first line\n;;; looks like code\n"
    document, tags, _ = classify(text)

    assert tags.has(text.index(";;;"), PS)
    assert prose_line_flags(document, tags) == (True, True, False)


def test_continuation_inherits_code() -> None:
    text = "(foo\nplain words)\n"
    _, tags, _ = classify(text)

    assert tags.snapshot() == {}


def test_close_bracket_only_opener_is_code() -> None:
    text = "(foo\n\n)\nbar\n"
    _, tags, _ = classify(text)

    assert tags.snapshot() == {}


def test_prose_brackets_do_not_affect_later_depth() -> None:
    text = "Some prose (with open paren\n\n  indented after\n"
    _, tags, _ = classify(text)

    assert tags.has(0, PS)
    assert tags.has(text.index("indented"), PS)


def test_reclassify_is_idempotent() -> None:
    text = "(a)\n\nSome words\nmore\n\n  (b)\n\n;; done\n"
    _, tags, classifier = classify(text)
    first_pass = tags.snapshot()

    classifier.reclassify(0, len(text))

    assert tags.snapshot() == first_pass
    assert classifier.last_pass is not None
    assert classifier.last_pass.changed == 0


def test_paragraphs_are_uniform() -> None:
    text = (
        "Intro line\n(looks like code)\n\n(defun f ()\n  body)\n\n"
        "  indented words\n;; tail\n\n`\nquoted\n"
    )
    document, tags, _ = classify(text)
    boundary = BoundaryPredicate(document)

    for paragraph in iter_paragraphs(document, tags, boundary):
        flags = {
            tags.has(document.first_nonblank(offset), PS)
            for offset in document.line_offsets()
            if paragraph.start <= offset <= paragraph.end
        }
        assert flags == {paragraph.prose}


def test_inverted_range_is_ignored() -> None:
    _, tags, classifier = make_classifier("Prose\n")

    classifier.reclassify(5, 2)

    assert tags.snapshot() == {}
    assert classifier.last_pass is None


def test_out_of_range_positions_are_clamped() -> None:
    _, tags, classifier = make_classifier("Prose\n")

    classifier.reclassify(-10, 1000)

    assert tags.snapshot() == {0: PS, 5: NTN}


def test_edit_after_tag_slot_only_reconciles_newline_mark() -> None:
    _, tags, classifier = classify("Hello world\n")
    tags.remove(11)

    classifier.reclassify(3, 5)

    assert tags.snapshot() == {0: PS, 11: NTN}
    assert classifier.last_pass is not None
    assert classifier.last_pass.lines == 0


def test_edit_inside_indentation_keeps_line_in_scope() -> None:
    _, tags, classifier = make_classifier("  Hello\n")

    classifier.reclassify(1, 1)

    assert tags.has(2, PS)
    assert classifier.last_pass is not None
    assert classifier.last_pass.lines == 1


def test_stale_tags_are_cleared() -> None:
    _, tags, classifier = make_classifier("(code)\n")
    tags.put(3, PS)
    tags.put(6, NTN)

    classifier.reclassify(0, 0)

    assert tags.snapshot() == {}
    assert classifier.last_pass is not None
    assert classifier.last_pass.invalidated_from == 3


def test_walk_without_earlier_states_runs_to_document_end() -> None:
    _, tags, classifier = make_classifier("Alpha\nbeta\ngamma\n\ndelta\n")

    classifier.reclassify(0, 0)

    assert set(tags.snapshot()) == {0, 5, 6, 10, 11, 16, 18, 23}
    assert classifier.last_pass is not None
    assert classifier.last_pass.stopped_at is None


def test_walk_stops_where_nesting_state_is_unchanged() -> None:
    _, tags, classifier = classify("one\n\ntwo\n\nthree\n")
    tags.remove(0)
    tags.remove(3)

    classifier.reclassify(0, 0)

    assert tags.snapshot() == {0: PS, 3: NTN, 5: PS, 8: NTN, 10: PS, 15: NTN}
    assert classifier.last_pass is not None
    assert classifier.last_pass.stopped_at == 5
    assert classifier.last_pass.extended == 1


def test_walk_revisits_later_paragraphs_when_depth_changes() -> None:
    document, tags, classifier = classify("foo\n\n  bar\n")
    assert tags.has(7, PS)

    # Opening a bracket on the first line swallows the indented paragraph.
    document.replace(0, 0, "(")
    tags.shift(0, 0, 1)
    classifier.oracle.follow_edit(0, 1)
    classifier.reclassify(0, 1)

    assert tags.snapshot() == {}
    assert classifier.oracle.depth_at(7) == 1
    assert classifier.last_pass is not None
    assert classifier.last_pass.stopped_at is None


def test_paragraph_bounds_and_iteration() -> None:
    text = "one\ntwo\n\n(three)\n"
    document, tags, _ = classify(text)
    boundary = BoundaryPredicate(document)

    assert paragraph_bounds(document, boundary, 5) == (0, 7)
    assert paragraph_bounds(document, boundary, 8) is None
    paragraphs = list(iter_paragraphs(document, tags, boundary))
    assert [(p.start, p.end, p.prose) for p in paragraphs] == [
        (0, 7, True),
        (9, 16, False),
    ]
