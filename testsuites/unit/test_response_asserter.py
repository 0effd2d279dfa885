import httpx
import pytest

from restactor.assertions.extractor import ExtractorSlot
from restactor.assertions.failure_report import AggregateAssertionFailure
from restactor.assertions.response_asserter import ResponseMatchers

pytestmark = pytest.mark.assertions


def match(response, slot=None):
    return ResponseMatchers(response, slot or ExtractorSlot()).match()


def messages(asserter):
    return [failure.message for failure in asserter.get_assertions().errors_collected()]


def test_status_checks():
    asserter = match(httpx.Response(201))
    asserter.accepted().status_code(201).status_code(lambda status: status.is_between(200, 299))
    assert not asserter.has_errors()
    asserter.assert_all()


def test_status_mismatch_is_soft():
    asserter = match(httpx.Response(404, text="not found"))
    asserter.accepted().status_code(200).body_is("not found")

    assert asserter.errors_count() == 2
    assert messages(asserter) == [
        "[Status code] Expected 404 to satisfy accepted range [200, 300)",
        "[Status code] Expected 404 to equal 200",
    ]
    with pytest.raises(AggregateAssertionFailure):
        asserter.assert_all()


def test_error_heading_is_used_in_report():
    asserter = match(httpx.Response(500)).with_error_heading("Create channel").status_code(201)
    with pytest.raises(AggregateAssertionFailure) as exc_info:
        asserter.assert_all()
    assert str(exc_info.value).startswith("Create channel (1 failure)")


def test_header_assertions():
    response = httpx.Response(
        200,
        headers=[("X-Request-Id", "abc-1"), ("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")],
    )
    asserter = match(response).headers(
        lambda headers: headers.all().contains_key("X-Request-Id"),
        lambda headers: headers.with_name("x-request-id").starts_with("abc"),
        lambda headers: headers.with_name("Set-Cookie").is_equal_to("a=1, b=2"),
        lambda headers: headers.with_name("X-Missing").is_not_none(),
    )
    assert messages(asserter) == ["[Header 'X-Missing'] Expected a value, got None"]


def test_header_extraction():
    slot = ExtractorSlot()
    match(httpx.Response(200, headers={"Location": "/users/7"}), slot).headers(
        lambda headers: headers.extract().with_name("Location")
    )
    assert slot.value == "/users/7"


def test_consumer_assertion_error_is_recorded():
    def consumer(body):
        assert body.actual == "other"

    asserter = match(httpx.Response(200, text="hello")).body_as_string(consumer)
    assert asserter.errors_count() == 1


def test_no_body():
    assert not match(httpx.Response(204)).no_body().has_errors()
    assert match(httpx.Response(200, text="x")).no_body().errors_count() == 1


def test_json_body_dispatch():
    asserter = match(httpx.Response(200, json={"id": 7, "name": "x"})).body_as_json(
        lambda body: body.json_path_as_integer("$.id").is_equal_to(7),
        lambda body: body.json_path_as_string("$.name").is_equal_to("y"),
    )
    assert messages(asserter) == ["[JSON path '$.name'] Expected 'x' to equal 'y'"]


def test_structured_body_kinds_require_a_body():
    asserter = match(httpx.Response(200)).body_as_json(
        lambda body: body.json_path_as_string("$.id")
    )
    assert messages(asserter) == ["Expected a JSON response body, got an empty body"]


def test_xml_html_and_bytes_dispatch():
    asserter = match(httpx.Response(200, text="<a><b>1</b></a>")).body_as_xml(
        lambda xml: xml.value_by_xpath("/a/b").is_equal_to("1")
    )
    assert not asserter.has_errors()

    asserter = match(httpx.Response(200, text="<p id='x'>42</p>")).body_as_html(
        lambda html: html.css_selector_as_long("#x").is_equal_to(42)
    )
    assert not asserter.has_errors()

    asserter = match(httpx.Response(200, content=b"\x00\x01\x02")).body_as_bytes(
        lambda body: body.has_size(3).starts_with(b"\x00")
    )
    assert not asserter.has_errors()


def test_custom_decoder():
    asserter = match(httpx.Response(200, content=b"a;b;c")).body_as(
        lambda raw: raw.decode().split(";"),
        lambda decoded: decoded.is_equal_to(["a", "b", "c"]),
    )
    assert not asserter.has_errors()


def test_extract_on_asserter_captures_whole_body():
    slot = ExtractorSlot()
    match(httpx.Response(200, content=b'{"id": 7}'), slot).extract().body_as_json(
        lambda body: body.json_path_as_integer("$.id")
    )
    assert slot.value == '{"id": 7}'


def test_extract_on_body_captures_path_value():
    slot = ExtractorSlot()
    match(httpx.Response(200, json={"id": 7}), slot).body_as_json(
        lambda body: body.extract().json_path_as_integer("$.id")
    )
    assert slot.value == 7


def test_nothing_extracted_without_extract():
    slot = ExtractorSlot()
    match(httpx.Response(200, text="body"), slot).body_as_string()
    assert slot.value is None
