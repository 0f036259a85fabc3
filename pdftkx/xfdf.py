"""XFDF form data files for the ``fill_form`` operation."""

from __future__ import annotations

import io
import logging
from typing import Any, Mapping
from xml.etree import ElementTree

from .tmpfile import TempFile
from .utils import PathLike

LOGGER = logging.getLogger("pdftkx.xfdf")

XFDF_NAMESPACE = "http://ns.adobe.com/xfdf/"


def _nest(data: Mapping[str, Any]) -> dict[str, Any]:
    """Expand dotted field names (``address.city``) into nested mappings."""

    tree: dict[str, Any] = {}
    for key, value in data.items():
        node = tree
        parts = str(key).split(".")
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        leaf = parts[-1]
        if isinstance(value, Mapping):
            existing = node.get(leaf)
            merged = existing if isinstance(existing, dict) else {}
            merged.update(_nest(value))
            node[leaf] = merged
        else:
            node[leaf] = value
    return tree


def _append_fields(parent: ElementTree.Element, fields: Mapping[str, Any]) -> None:
    for name, value in fields.items():
        field = ElementTree.SubElement(parent, "field", {"name": name})
        if isinstance(value, dict):
            _append_fields(field, value)
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            element = ElementTree.SubElement(field, "value")
            if item is None:
                continue
            if isinstance(item, bool):
                item = "Yes" if item else "Off"
            element.text = str(item)


def build_xfdf(data: Mapping[str, Any], encoding: str = "UTF-8") -> bytes:
    """Serialize form field *data* to an XFDF document.

    Dotted keys and nested mappings become nested ``<field>`` elements, lists
    become several ``<value>`` elements (multi-select fields) and booleans
    map to the checkbox states ``Yes``/``Off``.
    """

    root = ElementTree.Element("xfdf", {"xmlns": XFDF_NAMESPACE, "xml:space": "preserve"})
    fields = ElementTree.SubElement(root, "fields")
    _append_fields(fields, _nest(data))

    buffer = io.BytesIO()
    ElementTree.ElementTree(root).write(buffer, encoding=encoding, xml_declaration=True)
    return buffer.getvalue()


class XfdfFile(TempFile):
    """Temporary ``.xfdf`` file holding form data for ``fill_form``."""

    def __init__(
        self,
        data: Mapping[str, Any],
        encoding: str = "UTF-8",
        prefix: str = "tmp_pdftkx_",
        directory: PathLike | None = None,
    ) -> None:
        super().__init__(
            suffix=".xfdf",
            prefix=prefix,
            directory=directory,
            content=build_xfdf(data, encoding),
        )
        LOGGER.debug("Wrote %d form field(s) to %s", len(data), self.path)


__all__ = ["XFDF_NAMESPACE", "XfdfFile", "build_xfdf"]
