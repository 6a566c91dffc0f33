"""Common Event Format parsing.

Contains the header and extension tokenizers, the severity normalizer, the
field type table and the :class:`CefParser` that sequences them.
"""

from __future__ import annotations

from .extension import fold_pairs, split_extension
from .fields import FIELD_SPECS, FieldSpec, coerce_fields, convert_value
from .header import HEADER_SECTIONS, parse_header_prefix, split_header
from .parser import CefParser, WarningSink
from .severity import parse_severity, severity_label

__all__ = [
    "FIELD_SPECS",
    "HEADER_SECTIONS",
    "CefParser",
    "FieldSpec",
    "WarningSink",
    "coerce_fields",
    "convert_value",
    "fold_pairs",
    "parse_header_prefix",
    "parse_severity",
    "severity_label",
    "split_extension",
    "split_header",
]
