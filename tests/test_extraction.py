from __future__ import annotations

from genrelay.core.extraction import extract_structured, strip_code_fence


def test_fenced_json_is_parsed():
    extracted = extract_structured('```json\n{"a":1}\n```')

    assert extracted.parsed == {"a": 1}
    assert extracted.raw == '{"a":1}'


def test_untagged_fence_is_stripped():
    assert strip_code_fence('```\n[1, 2]\n```') == "[1, 2]"
    assert extract_structured('```\n[1, 2]\n```').parsed == [1, 2]


def test_plain_text_is_kept_raw():
    extracted = extract_structured("hello world")

    assert extracted.parsed is None
    assert extracted.raw == "hello world"


def test_embedded_object_recovered_in_lenient_mode():
    text = 'note: {"x":2} thanks'

    assert extract_structured(text).parsed == {"x": 2}
    assert extract_structured(text, lenient=False).parsed is None
    assert extract_structured(text).raw == text


def test_strict_parse_wins_over_embedded_slice():
    extracted = extract_structured('  {"scenes": [{"id": 1}, {"id": 2}]}  ')

    assert extracted.parsed == {"scenes": [{"id": 1}, {"id": 2}]}


def test_broken_json_degrades_to_raw():
    extracted = extract_structured('```json\n{"a": 1,,}\n```')

    assert extracted.parsed is None
    assert extracted.raw == '{"a": 1,,}'


def test_empty_input():
    extracted = extract_structured("   ")

    assert extracted.raw == ""
    assert extracted.parsed is None
