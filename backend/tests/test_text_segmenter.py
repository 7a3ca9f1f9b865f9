from __future__ import annotations

import pytest

from formrelay.answers.models import AnswerPair
from formrelay.answers.text import segment_answers, split_label_value, unescape


@pytest.mark.parametrize(
    "raw",
    [
        "plain text",
        r"https:\/\/www.jotform.com\/uploads\/a.png",
        r"say \"hi\"\nnext line",
        "\\\\/double escaped\\\\n",
        "",
        "\\",
    ],
)
def test_unescape_is_idempotent(raw: str) -> None:
    once = unescape(raw)
    assert unescape(once) == once


def test_unescape_handles_slash_quote_and_newline_sequences() -> None:
    assert unescape(r"a\/b \"c\"\nd") == 'a/b "c"\nd'
    assert unescape("no escapes here") == "no escapes here"


def test_segmenter_splits_unambiguous_pairs() -> None:
    assert segment_answers("A: 1, B: 2, C: 3") == [
        AnswerPair("A", "1"),
        AnswerPair("B", "2"),
        AnswerPair("C", "3"),
    ]


def test_segmenter_keeps_times_inside_values() -> None:
    assert segment_answers("Time: 10:30am") == [AnswerPair("Time", "10:30am")]


def test_segmenter_only_splits_before_new_labels() -> None:
    pairs = segment_answers("Notes: see you, Bob, Status: Open")

    assert pairs == [AnswerPair("Notes", "see you, Bob"), AnswerPair("Status", "Open")]


def test_segmenter_splits_label_at_last_delimiter() -> None:
    assert split_label_value("Step 1: Contact: Jane") == AnswerPair("Step 1: Contact", "Jane")


def test_segmenter_keeps_url_values_intact() -> None:
    pairs = segment_answers("Website: https://example.org/a?b=1, Budget: 100")

    assert pairs == [AnswerPair("Website", "https://example.org/a?b=1"), AnswerPair("Budget", "100")]


def test_segmenter_uses_lines_when_present() -> None:
    raw = "Name: Jane Doe\n\nNotes: one, Two: not a boundary\r\nDone"

    assert segment_answers(raw) == [
        AnswerPair("Name", "Jane Doe"),
        AnswerPair("Notes: one, Two", "not a boundary"),
        AnswerPair("Done", ""),
    ]


def test_segmenter_unescapes_newlines_before_splitting() -> None:
    assert segment_answers(r"Name: Jane\nCity: Cork") == [AnswerPair("Name", "Jane"), AnswerPair("City", "Cork")]


@pytest.mark.parametrize("prefix", ["pretty ", "Pretty: ", "PRETTY - "])
def test_segmenter_strips_leading_pretty_marker(prefix: str) -> None:
    assert segment_answers(f"{prefix}Name: Jane") == [AnswerPair("Name", "Jane")]


def test_segmenter_does_not_strip_words_starting_with_pretty() -> None:
    assert segment_answers("Prettiness: high") == [AnswerPair("Prettiness", "high")]


def test_segmenter_falls_back_to_first_plain_colon() -> None:
    assert segment_answers("Site:https://example.org") == [AnswerPair("Site", "https://example.org")]


def test_segmenter_returns_label_only_pair_without_colon() -> None:
    assert segment_answers("  just a note  ") == [AnswerPair("just a note", "")]


@pytest.mark.parametrize("raw", [None, "", "   ", "pretty"])
def test_segmenter_empty_input_yields_no_pairs(raw: str | None) -> None:
    assert segment_answers(raw) == []


def test_segmenter_lookahead_is_bounded() -> None:
    long_label = "X" * 250
    pairs = segment_answers(f"Notes: a, {long_label}: b")

    assert len(pairs) == 1
    assert pairs[0].label == f"Notes: a, {long_label}"
    assert pairs[0].value == "b"


def test_segmenter_splits_pairs_without_space_after_colon() -> None:
    assert segment_answers("Name:Jane Doe, Email:jane@x.com, Phone:555") == [
        AnswerPair("Name", "Jane Doe"),
        AnswerPair("Email", "jane@x.com"),
        AnswerPair("Phone", "555"),
    ]


def test_segmenter_compact_pairs_keep_times_and_urls() -> None:
    assert segment_answers("Time:10:30am, Site:https://example.org/a, Note:see you, Bob") == [
        AnswerPair("Time", "10:30am"),
        AnswerPair("Site", "https://example.org/a"),
        AnswerPair("Note", "see you, Bob"),
    ]
