import pytest

from search_backend.errors import MalformedIntentError
from search_backend.search.json_extract import extract_json_object


def test_plain_json():
    assert extract_json_object('{"place": "kilimani"}') == {"place": "kilimani"}


def test_prose_wrapped_json():
    raw = 'Sure! Here is the intent:\n{"cuisine": "sushi", "people": 4}\nHope that helps.'
    assert extract_json_object(raw) == {"cuisine": "sushi", "people": 4}


def test_markdown_fenced_json():
    raw = '```json\n{"vibe": "rooftop"}\n```'
    assert extract_json_object(raw) == {"vibe": "rooftop"}


def test_nested_object_is_returned_whole():
    raw = 'result: {"place": "westlands", "extra": {"a": 1}} trailing'
    assert extract_json_object(raw) == {"place": "westlands", "extra": {"a": 1}}


def test_braces_inside_strings_do_not_break_scan():
    raw = 'note {"keywords": ["{weird}", "ok"]} end'
    assert extract_json_object(raw) == {"keywords": ["{weird}", "ok"]}


def test_skips_unparseable_candidate():
    raw = "{not json} then {\"place\": \"karen\"}"
    assert extract_json_object(raw) == {"place": "karen"}


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        None,
        "I could not understand the query.",
        '{"place": "kilimani", "cuisine": "sus',
        "[1, 2, 3]",
        '"just a string"',
    ],
)
def test_malformed_inputs_raise(raw):
    with pytest.raises(MalformedIntentError):
        extract_json_object(raw)
