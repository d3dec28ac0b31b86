from cinelingo.subtitles.anchors import (
    build_segments,
    codepoint_index,
    resolve_spans,
    split_words,
    utf16_offset,
)
from cinelingo.subtitles.models import AnnotationCategory


LINE = "I kicked the bucket yesterday"


def test_single_anchor_produces_span(make_annotation) -> None:
    annotation = make_annotation("bucket")

    spans = resolve_spans(LINE, [annotation])

    assert len(spans) == 1
    assert (spans[0].start, spans[0].end) == (13, 19)
    assert spans[0].category is AnnotationCategory.VOCABULARY
    assert spans[0].annotation is annotation


def test_overlapping_anchor_is_discarded(make_annotation) -> None:
    idiom = make_annotation("kicked the bucket", AnnotationCategory.CULTURE)
    word = make_annotation("bucket")

    spans = resolve_spans(LINE, [word, idiom])

    assert [(span.start, span.end) for span in spans] == [(2, 19)]
    assert spans[0].annotation is idiom


def test_adjacent_spans_are_both_kept(make_annotation) -> None:
    spans = resolve_spans(LINE, [make_annotation("kicked"), make_annotation(" the")])

    assert [(span.start, span.end) for span in spans] == [(2, 8), (8, 12)]


def test_spans_are_sorted_and_disjoint(make_annotation) -> None:
    annotations = [
        make_annotation("yesterday", AnnotationCategory.GRAMMAR),
        make_annotation("I"),
        make_annotation("the bucket"),
        make_annotation("bucket yes"),
    ]

    spans = resolve_spans(LINE, annotations)

    assert [span.start for span in spans] == sorted(span.start for span in spans)
    for earlier, later in zip(spans, spans[1:]):
        assert earlier.end <= later.start
    assert [LINE[span.start : span.end] for span in spans] == ["I", "the bucket", "yesterday"]


def test_match_is_case_insensitive(make_annotation) -> None:
    spans = resolve_spans("Hello World", [make_annotation("WORLD")])

    assert [(span.start, span.end) for span in spans] == [(6, 11)]


def test_only_first_occurrence_is_highlighted(make_annotation) -> None:
    spans = resolve_spans("no, no, no", [make_annotation("no")])

    assert [(span.start, span.end) for span in spans] == [(0, 2)]


def test_missing_and_empty_anchors_are_skipped(make_annotation) -> None:
    annotations = [make_annotation("absent"), make_annotation("")]

    assert resolve_spans(LINE, annotations) == []


def test_offsets_are_utf16_code_units(make_annotation) -> None:
    line = "\U0001F600 hello"

    spans = resolve_spans(line, [make_annotation("hello")])

    assert [(span.start, span.end) for span in spans] == [(3, 8)]
    assert utf16_offset(line, 2) == 3
    assert codepoint_index(line, 3) == 2


def test_build_segments_alternates_plain_and_tagged(make_annotation) -> None:
    idiom = make_annotation("kicked the bucket", AnnotationCategory.CULTURE)
    spans = resolve_spans(LINE, [idiom])

    segments = build_segments(LINE, spans)

    assert [segment.text for segment in segments] == ["I ", "kicked the bucket", " yesterday"]
    assert [segment.is_tagged for segment in segments] == [False, True, False]
    assert segments[0].words == ("I",)
    assert segments[1].annotation is idiom
    assert segments[1].words == ()
    assert segments[2].words == ("yesterday",)


def test_build_segments_with_astral_characters(make_annotation) -> None:
    line = "\U0001F600 hello there"
    spans = resolve_spans(line, [make_annotation("hello")])

    segments = build_segments(line, spans)

    assert [segment.text for segment in segments] == ["\U0001F600 ", "hello", " there"]


def test_build_segments_without_spans_is_one_plain_segment() -> None:
    segments = build_segments("It's a well-known fact.", [])

    assert len(segments) == 1
    assert segments[0].words == ("It's", "a", "well-known", "fact")


def test_split_words_ignores_punctuation() -> None:
    assert split_words("Wait... what?!") == ("Wait", "what")
