"""
Tests for key-path JSON lookup.
"""
import pytest

from xhttp_client import JsonType, KeyPathNotFoundError, MalformedJSONError, get_json_field, get_json_raw

DOC = b"""
{
    "args": {},
    "headers": {"Host": "httpbin.org", "Accept": "*/*"},
    "origin": "1.2.3.4",
    "count": -12.5e3,
    "ok": true,
    "missing": null,
    "items": [{"id": 1}, {"id": 2, "tags": ["a", "b"]}],
    "quote\\"d": "esc \\"value\\"",
    "nested": {"deeper": {"deepest": [10, 20, 30]}}
}
"""


def test_top_level_string_is_unquoted():
    assert get_json_field(DOC, "origin") == (b"1.2.3.4", JsonType.STRING)


def test_nested_object_member():
    assert get_json_field(DOC, "headers", "Host") == (b"httpbin.org", JsonType.STRING)


def test_value_types():
    assert get_json_field(DOC, "count") == (b"-12.5e3", JsonType.NUMBER)
    assert get_json_field(DOC, "ok") == (b"true", JsonType.BOOLEAN)
    assert get_json_field(DOC, "missing") == (b"null", JsonType.NULL)
    assert get_json_field(DOC, "args") == (b"{}", JsonType.OBJECT)


def test_object_value_is_raw_slice():
    value, kind = get_json_field(DOC, "headers")
    assert kind is JsonType.OBJECT
    assert value == b'{"Host": "httpbin.org", "Accept": "*/*"}'


def test_array_index():
    assert get_json_field(DOC, "items", "[1]", "id") == (b"2", JsonType.NUMBER)
    assert get_json_field(DOC, "items", "[1]", "tags", "[0]") == (b"a", JsonType.STRING)
    assert get_json_field(DOC, "nested", "deeper", "deepest", "[2]") == (b"30", JsonType.NUMBER)


def test_escaped_key_and_value():
    value, kind = get_json_field(DOC, 'quote"d')
    assert kind is JsonType.STRING
    assert value == b'esc \\"value\\"'


def test_no_keys_returns_document():
    value, kind = get_json_field(b'  [1, 2]  ')
    assert (value, kind) == (b"[1, 2]", JsonType.ARRAY)


def test_str_input():
    assert get_json_field('{"a": {"b": "c"}}', "a", "b") == (b"c", JsonType.STRING)


def test_get_json_raw_keeps_quotes():
    assert get_json_raw(DOC, "origin") == b'"1.2.3.4"'
    assert get_json_raw(DOC, "items", "[0]") == b'{"id": 1}'


def test_sibling_with_same_name_in_nested_object_is_skipped():
    doc = b'{"a": {"target": 1}, "target": 2}'
    assert get_json_field(doc, "target") == (b"2", JsonType.NUMBER)


@pytest.mark.parametrize(
    "keys",
    [
        ("nope",),
        ("headers", "nope"),
        ("items", "[5]"),
        ("origin", "inner"),
        ("args", "x"),
        ("items", "id"),
        ("headers", "[0]"),
    ],
)
def test_key_path_not_found(keys):
    with pytest.raises(KeyPathNotFoundError) as exc:
        get_json_field(DOC, *keys)
    assert exc.value.keys == keys


@pytest.mark.parametrize(
    "doc",
    [
        b"",
        b"   ",
        b'{"a": }',
        b'{"a" 1}',
        b'{"a": "unterminated}',
        b'{"a": 1,, "b": 2}',
        b"{'a': 1}",
        b'[1, 2',
    ],
)
def test_malformed_payload(doc):
    with pytest.raises(MalformedJSONError):
        get_json_field(doc, "b")


def test_deeply_nested_sibling_is_skipped():
    doc = '{"deep": ' + "[" * 600 + "]" * 600 + ', "origin": "1.2.3.4"}'
    assert get_json_field(doc, "origin") == (b"1.2.3.4", JsonType.STRING)


def test_deeply_nested_objects_are_skipped():
    doc = '{"deep": ' + '{"a": ' * 2000 + "[1, {}]" + "}" * 2000 + ', "ok": true}'
    assert get_json_field(doc, "ok") == (b"true", JsonType.BOOLEAN)


def test_deeply_nested_value_is_returned_whole():
    nested = "[" * 1000 + "]" * 1000
    value, kind = get_json_field('{"deep": ' + nested + "}", "deep")
    assert value == nested.encode()
    assert kind is JsonType.ARRAY


def test_deeply_nested_unterminated_is_malformed():
    with pytest.raises(MalformedJSONError):
        get_json_field('{"deep": ' + "[" * 600, "origin")
