import json
from decimal import Decimal

import pytest

from restactor.assertions.extractor import ExtractorSlot
from restactor.assertions.soft_assertions import SoftAssertions

pytestmark = pytest.mark.assertions


ORDER = {
    "id": 42,
    "status": "paid",
    "active": True,
    "price": 10.5,
    "items": [{"id": 1, "sku": "A-1"}, {"id": 2, "sku": "B-2"}],
    "owner": {"name": "alice", "email": "alice@example.com"},
    "tags": ["a", "b"],
    "note": None,
}


@pytest.fixture
def softly():
    return SoftAssertions()


@pytest.fixture
def slot():
    return ExtractorSlot()


@pytest.fixture
def body(softly, slot):
    return softly.assert_json_path(json.dumps(ORDER), slot)


def messages(softly):
    return [failure.message for failure in softly.errors_collected()]


def test_typed_path_accessors(softly, body):
    body.json_path_as_integer("$.id").is_equal_to(42)
    body.json_path_as_string("$.status").is_equal_to("paid")
    body.json_path_as_string("$.id").is_equal_to("42")
    body.json_path_as_boolean("$.active").is_true()
    body.json_path_as_decimal("$.price").is_equal_to(Decimal("10.5"))
    body.json_path_as_object("$.note").is_none()
    body.json_path_as("$.owner", dict).is_instance_of(dict)
    body.json_path_as_list_of("$.items[*].id", int).contains_exactly(1, 2)
    body.json_path_as_list_of("$.tags").has_size(2)
    body.json_path_present("$.owner.email").is_true()
    body.json_path_present("$.owner.phone").is_false()
    assert messages(softly) == []


def test_missing_path_is_reported_once(softly, body):
    body.json_path_as_string("$.missing").is_equal_to("x").starts_with("y")
    assert softly.errors_count() == 1
    assert messages(softly)[0].startswith("JSON path '$.missing' not found in")


def test_unconvertible_value_is_reported(softly, body):
    body.json_path_as_integer("$.status").is_positive()
    assert softly.errors_count() == 1
    assert messages(softly)[0].startswith("Cannot read JSON path '$.status' as int: 'paid'")


def test_value_failures_carry_the_path(softly, body):
    body.json_path_as_integer("$.id").is_greater_than(100)
    assert messages(softly) == ["[JSON path '$.id'] Expected 42 to be greater than 100"]


def test_invalid_json_body(softly, slot):
    body = softly.assert_json_path("not json", slot)
    body.json_path_as_string("$.id").is_equal_to("x")
    assert softly.errors_count() == 1
    assert messages(softly)[0].startswith("Response body is not valid JSON")


def test_extract_captures_first_path_value(body, slot):
    body.extract().json_path_as_integer("$.id").is_positive()
    body.json_path_as_string("$.status")
    assert slot.value == 42


def test_whole_body_comparison(softly, body):
    body.body().is_equal_to_json('{"id": 42, "tags": ["b", "a"]}')
    body.body().is_equal_to_json({"owner": {"name": "alice"}})
    body.body().is_not_equal_to_json({"id": 43})
    body.body().has_json_path("$.owner.name").does_not_have_json_path("$.owner.phone")
    body.body().has_json_path_value("$.owner.name", "alice")
    assert messages(softly) == []

    body.body().is_strictly_equal_to_json({"id": 42})
    assert softly.errors_count() == 1


def test_strict_comparison_respects_array_order(softly):
    content = softly.assert_json_body('{"tags": ["a", "b"]}')
    content.is_strictly_equal_to_json({"tags": ["a", "b"]})
    content.is_strictly_equal_to_json({"tags": ["b", "a"]})
    assert softly.errors_count() == 1


def test_sub_document_assertions(softly, body):
    body.json_path_as_json(
        "$.owner",
        lambda owner: owner.json_path_as_string("$.name").is_equal_to("alice"),
        lambda owner: owner.json_path_as_string("$.email").ends_with("@example.org"),
    ).is_equal_to_json({"name": "alice"})
    assert softly.errors_count() == 1
    assert "alice@example.com" in messages(softly)[0]


def test_schema_validation_reports_every_violation(softly, slot):
    schema = {
        "type": "object",
        "required": ["id", "email"],
        "properties": {
            "id": {"type": "integer"},
            "email": {"type": "string", "format": "email"},
        },
    }
    body = softly.assert_json_path('{"id": "x", "email": "nope"}', slot)
    body.validate_schema(schema)

    failures = messages(softly)
    assert len(failures) == 2
    assert any(message.startswith("[JSON Schema] id: ") for message in failures)
    assert any(message.startswith("[JSON Schema] email: ") for message in failures)


def test_schema_validation_passes_for_valid_body(softly, body):
    body.validate_schema('{"type": "object", "required": ["id"]}')
    assert not softly.has_errors()


def test_invalid_schema_is_reported(softly, body):
    body.validate_schema({"type": "nope"})
    assert messages(softly)[0].startswith("[JSON Schema] Invalid schema:")


def test_malformed_schema_text_is_recorded_not_raised(softly, body):
    body.validate_schema("{not json")
    body.json_path_as_integer("$.id").is_positive()

    errors = messages(softly)
    assert len(errors) == 1
    assert errors[0].startswith("[JSON Schema] Invalid schema: Expecting property name")
