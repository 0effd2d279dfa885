"""
XML assertions backed by lxml.

XPath queries, whitespace-insensitive and canonical document comparison, and
XSD validation. Namespaced documents need a prefix mapping registered with
``with_namespace_context`` before querying.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from lxml import etree

from .extractor import ExtractorSlot
from .value_assert import ObjectAssert, StringAssert


def _parse(xml: str, remove_blank_text: bool = False) -> etree._Element:
    parser = etree.XMLParser(remove_blank_text=remove_blank_text, resolve_entities=False)
    return etree.fromstring(xml.encode("utf-8"), parser)


def _canonical(element: etree._Element) -> bytes:
    return etree.tostring(element, method="c14n")


def _node_text(node: Any) -> str:
    if isinstance(node, etree._Element):
        return "".join(node.itertext())
    return str(node)


class NodesAssert(ObjectAssert):
    """Assertions on the node set selected by an XPath expression."""

    def __init__(self, softly: Any, nodes: List[Any], xpath: str, enabled: bool = True) -> None:
        super().__init__(softly, nodes, description=f"XPath '{xpath}'", enabled=enabled)

    def exist(self) -> "NodesAssert":
        return self._check(bool(self.actual), "Expected at least one node")

    def do_not_exist(self) -> "NodesAssert":
        return self._check(not self.actual, f"Expected no nodes, found {len(self.actual)}")

    def have_size(self, expected: int) -> "NodesAssert":
        return self._check(
            len(self.actual) == expected,
            f"Expected {expected} nodes, found {len(self.actual)}",
        )

    def have_attribute(self, name: str, value: Optional[str] = None) -> "NodesAssert":
        """Every selected element carries ``name`` (with ``value`` if given)."""
        offending = [
            node for node in self.actual
            if not isinstance(node, etree._Element)
            or node.get(name) is None
            or (value is not None and node.get(name) != value)
        ]
        expectation = f"attribute '{name}'" + (f" = {value!r}" if value is not None else "")
        return self._check(
            bool(self.actual) and not offending,
            f"Expected all nodes to have {expectation} ({len(offending)} did not)",
        )


class XmlAssert:
    """XML body assertions."""

    def __init__(self, softly: Any, xml_body: str, slot: ExtractorSlot) -> None:
        self._softly = softly
        self._slot = slot
        self._raw = xml_body
        self._namespaces: Dict[str, str] = {}
        try:
            self.actual: Optional[etree._Element] = _parse(xml_body)
        except etree.XMLSyntaxError as e:
            self.actual = None
            softly.fail(f"Response body is not valid XML: {e}")

    def with_namespace_context(self, prefix_to_uri: Dict[str, str]) -> "XmlAssert":
        self._namespaces = dict(prefix_to_uri)
        return self

    def _select(self, xpath: str) -> Optional[List[Any]]:
        if self.actual is None:
            return None
        try:
            result = self.actual.xpath(xpath, namespaces=self._namespaces or None)
        except etree.XPathError as e:
            self._softly.fail(f"Invalid XPath '{xpath}': {e}")
            return None
        return result if isinstance(result, list) else [result]

    def nodes_by_xpath(self, xpath: str) -> NodesAssert:
        nodes = self._select(xpath)
        return NodesAssert(
            self._softly,
            self._slot.capture(nodes) if nodes is not None else [],
            xpath,
            enabled=nodes is not None,
        )

    def value_by_xpath(self, xpath: str) -> StringAssert:
        """String value of the first selected node (text content for elements)."""
        nodes = self._select(xpath)
        if nodes is None:
            return StringAssert(self._softly, None, enabled=False)
        if not nodes:
            self._softly.fail(f"XPath '{xpath}' did not select any node")
            return StringAssert(self._softly, None, enabled=False)
        value = self._slot.capture(_node_text(nodes[0]))
        return StringAssert(self._softly, value, description=f"XPath '{xpath}'")

    def has_xpath(self, xpath: str) -> "XmlAssert":
        self.nodes_by_xpath(xpath).exist()
        return self

    def does_not_have_xpath(self, xpath: str) -> "XmlAssert":
        self.nodes_by_xpath(xpath).do_not_exist()
        return self

    def is_similar_to(self, expected_xml: str) -> "XmlAssert":
        """Documents are equal once ignorable whitespace is removed."""
        return self._compare(expected_xml, remove_blank_text=True, relation="similar to")

    def is_identical_to(self, expected_xml: str) -> "XmlAssert":
        """Documents have the same canonical (C14N) form."""
        return self._compare(expected_xml, remove_blank_text=False, relation="identical to")

    def _compare(self, expected_xml: str, remove_blank_text: bool, relation: str) -> "XmlAssert":
        if self.actual is None:
            return self
        try:
            expected = _parse(expected_xml, remove_blank_text=remove_blank_text)
            actual = _parse(self._slot.capture(self._raw), remove_blank_text=remove_blank_text)
        except etree.XMLSyntaxError as e:
            self._softly.fail(f"Expected value is not valid XML: {e}")
            return self
        if _canonical(expected) != _canonical(actual):
            self._softly.fail(f"Expected XML {self._raw!r} to be {relation} {expected_xml!r}")
        return self

    def is_valid_against(self, xsd: str) -> "XmlAssert":
        if self.actual is None:
            return self
        try:
            schema = etree.XMLSchema(_parse(xsd))
        except (etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
            self._softly.fail(f"[XML Schema] Invalid schema: {e}")
            return self
        if not schema.validate(self.actual):
            for error in schema.error_log:
                self._softly.fail(f"[XML Schema] line {error.line}: {error.message}")
        return self

    def extract(self) -> "XmlAssert":
        self._slot.arm()
        return self


__all__ = [
    "NodesAssert",
    "XmlAssert",
]
