import pytest

from feedback_engine.services.json_extract import extract_json_object, parse_json_object


@pytest.mark.parametrize(
    "response, expected",
    [
        ('{"theme": "r2"}', '{"theme": "r2"}'),
        (
            'Here you go: {"theme":"r2","sentiment":"negative","urgency":4} Hope that helps!',
            '{"theme":"r2","sentiment":"negative","urgency":4}',
        ),
        ('```json\n{"theme": "kv"}\n```', '{"theme": "kv"}'),
        ('{"a": {"b": {}}} trailing {"c": 1}', '{"a": {"b": {}}}'),
        ('{"note": "a } inside", "x": 1}', '{"note": "a } inside", "x": 1}'),
        ('{"note": "escaped \\" quote }", "x": 1}', '{"note": "escaped \\" quote }", "x": 1}'),
    ],
)
def test_extract_first_balanced_object(response, expected):
    assert extract_json_object(response) == expected


@pytest.mark.parametrize(
    "response",
    [
        "",
        None,
        "I cannot help with that.",
        '{"theme": "workers", "sentiment": "pos',
    ],
)
def test_extract_rejects_missing_or_truncated_object(response):
    with pytest.raises(ValueError):
        extract_json_object(response)


def test_parse_embedded_object():
    data = parse_json_object('Sure! {"theme":"r2","sentiment":"negative","urgency":4} Hope that helps!')
    assert data == {"theme": "r2", "sentiment": "negative", "urgency": 4}


def test_parse_rejects_invalid_json_in_braces():
    with pytest.raises(ValueError):
        parse_json_object("{theme: r2}")
