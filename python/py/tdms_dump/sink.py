# py/tdms_dump/sink.py
"""Structure sinks receiving the hierarchy of decoded TDMS facts"""

import os
import re
import xml.etree.ElementTree as ET
from typing import Any, List, Optional, Union

import numpy as np


class StructureSink:
    """
    Stack discipline receiver for decoded structure.

    Every enter() is matched by exactly one leave(); record() adds a
    name/value leaf to the node that is currently open.
    """

    def __init__(self):
        self._open: List[str] = []

    @property
    def depth(self) -> int:
        return len(self._open)

    def enter(self, name: str) -> None:
        self._open.append(name)
        self._on_enter(name)

    def leave(self) -> None:
        if not self._open:
            raise RuntimeError("leave() called without a matching enter()")
        name = self._open.pop()
        self._on_leave(name)

    def record(self, name: str, value: Any) -> None:
        self._on_record(name, value)

    def _on_enter(self, name: str) -> None:
        pass

    def _on_leave(self, name: str) -> None:
        pass

    def _on_record(self, name: str, value: Any) -> None:
        pass


class NullSink(StructureSink):
    """Sink that discards everything"""


# Characters outside the XML 1.0 Char production
_NON_XML_CHARS = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]')


def _escape_non_xml_char(match) -> str:
    code = ord(match.group())
    return f"\\x{code:02x}" if code < 0x100 else f"\\u{code:04x}"


def format_value(value: Any) -> str:
    """
    Render a leaf value as text.

    Characters XML 1.0 can not hold, such as control characters in
    object paths, are written as \\xNN (or \\uNNNN) escapes.
    """
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return value.hex().upper()
    return _NON_XML_CHARS.sub(_escape_non_xml_char, str(value))


class XmlStructureSink(StructureSink):
    """
    Builds an XML document of the decoded structure.

    Examples:
        >>> sink = XmlStructureSink()
        >>> sink.enter("file")
        >>> sink.record("size_in_byte", 28)
        >>> sink.leave()
        >>> sink.write("input.tdms.structure.xml")
    """

    def __init__(self):
        super().__init__()
        self.root: Optional[ET.Element] = None
        self._elements: List[ET.Element] = []

    def _on_enter(self, name: str) -> None:
        if self._elements:
            element = ET.SubElement(self._elements[-1], name)
        elif self.root is None:
            element = self.root = ET.Element(name)
        else:
            raise RuntimeError(f"Document already has a root element <{self.root.tag}>")
        self._elements.append(element)

    def _on_leave(self, name: str) -> None:
        self._elements.pop()

    def _on_record(self, name: str, value: Any) -> None:
        if not self._elements:
            raise RuntimeError(f"record('{name}') called outside of any element")
        ET.SubElement(self._elements[-1], name).text = format_value(value)

    def tostring(self) -> str:
        """Serialize the document built so far"""
        if self.root is None:
            return ""
        ET.indent(self.root, space="  ")
        return ET.tostring(self.root, encoding="unicode")

    def write(self, path: Union[str, os.PathLike]) -> None:
        """
        Write the document built so far to a file.

        Args:
            path: Target file path, overwritten if it exists
        """
        tree = ET.ElementTree(self.root if self.root is not None else ET.Element("file"))
        ET.indent(tree, space="  ")
        tree.write(path, encoding="UTF-8", xml_declaration=True)
