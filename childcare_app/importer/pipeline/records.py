"""Extraction of raw legacy records from a validated XML document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Mapping

from lxml import etree

_ESCAPED_CHAR = re.compile(r"_x([0-9A-Fa-f]{4})_")


@dataclass(frozen=True)
class LegacyRecord:
    """String-keyed fields read from one XML element, in document order."""

    sequence_number: int
    source_line: int | None
    fields: Mapping[str, str | None]

    def get(self, name: str) -> str | None:
        return self.fields.get(name)


def decode_element_name(name: str) -> str:
    """Undo Access-style name escaping, e.g. ``Child_x0020_Name`` -> ``Child Name``."""

    return _ESCAPED_CHAR.sub(lambda match: chr(int(match.group(1), 16)), name)


def _local_name(tag: object) -> str | None:
    if not isinstance(tag, str):
        return None  # comments and processing instructions
    return etree.QName(tag).localname


def iter_legacy_records(document: etree._ElementTree, record_element: str) -> Iterator[LegacyRecord]:
    """
    Yield one ``LegacyRecord`` per direct child of the root named ``record_element``.

    Field values are passed through untouched; blank handling belongs to the mapper.
    """

    root = document.getroot()
    sequence = 0
    for element in root:
        if _local_name(element.tag) != record_element:
            continue
        sequence += 1
        fields: dict[str, str | None] = {}
        for child in element:
            name = _local_name(child.tag)
            if name is None:
                continue
            fields[decode_element_name(name)] = child.text
        yield LegacyRecord(sequence_number=sequence, source_line=element.sourceline, fields=fields)
