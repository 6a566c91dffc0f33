"""Type coercion and label indirection for CEF extension fields."""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Mapping
from dataclasses import dataclass

from ..models import FieldType, FieldValue, FieldWarning

LABEL_SUFFIX = "Label"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_INT_BOUNDS: dict[FieldType, tuple[int, int]] = {
    FieldType.INT32: (-(2**31), 2**31 - 1),
    FieldType.INT64: (-(2**63), 2**63 - 1),
}


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """How a known extension key is typed and named in the output."""

    type: FieldType
    labelled: bool = False  # output key comes from the sibling "<key>Label"


def _specs(keys: str, spec: FieldSpec) -> dict[str, FieldSpec]:
    return {key: spec for key in keys.split()}


FIELD_SPECS: Mapping[str, FieldSpec] = {
    # Custom IPv6 addresses, kept as strings.
    **_specs("c6a1 c6a2 c6a3 c6a4", FieldSpec(FieldType.STRING, labelled=True)),
    **_specs("cfp1 cfp2 cfp3 cfp4", FieldSpec(FieldType.FLOAT32, labelled=True)),
    **_specs("cn1 cn2 cn3 flexNumber1 flexNumber2", FieldSpec(FieldType.INT64, labelled=True)),
    **_specs(
        "cs1 cs2 cs3 cs4 cs5 cs6 flexString1 flexString2",
        FieldSpec(FieldType.STRING, labelled=True),
    ),
    # Custom dates stay opaque strings.
    **_specs(
        "deviceCustomDate1 deviceCustomDate2 flexDate1",
        FieldSpec(FieldType.STRING, labelled=True),
    ),
    **_specs(
        "cnt destinationTranslatedPort deviceDirection dpid dpt dvcpid fsize in "
        "oldFileSize sourceTranslatedPort spid spt type uid euid",
        FieldSpec(FieldType.INT32),
    ),
    **_specs("dlat dlong slat slong", FieldSpec(FieldType.FLOAT64)),
    "eventId": FieldSpec(FieldType.INT64),
}


class FieldConversionError(ValueError):
    """A single field could not be converted; the field is skipped."""


def _to_int(value: str, field_type: FieldType) -> int:
    if not _INT_RE.fullmatch(value):
        raise FieldConversionError(f"'{value}' is not a base-10 integer")
    out = int(value)
    lo, hi = _INT_BOUNDS[field_type]
    if out < lo or out > hi:
        raise FieldConversionError(f"{value} is out of range for {field_type.value}")
    return out


def _to_float(value: str, field_type: FieldType) -> float:
    # Surrounding whitespace is tolerated for decimals only.
    value = value.strip()
    if not _FLOAT_RE.fullmatch(value):
        raise FieldConversionError(f"'{value}' is not a decimal number")
    out = float(value)
    if math.isinf(out):
        raise FieldConversionError(f"{value} is out of range for {field_type.value}")
    if field_type is FieldType.FLOAT32:
        try:
            out = struct.unpack(">f", struct.pack(">f", out))[0]
        except OverflowError as exc:
            raise FieldConversionError(f"{value} is out of range for float32") from exc
    return out


def convert_value(value: str, field_type: FieldType) -> FieldValue:
    """Convert a raw extension value to ``field_type``."""
    if field_type is FieldType.STRING:
        return value
    if field_type in _INT_BOUNDS:
        return _to_int(value, field_type)
    return _to_float(value, field_type)


def coerce_fields(
    fields: Mapping[str, str],
) -> tuple[dict[str, FieldValue], list[FieldWarning]]:
    """Apply the field type table to folded extension fields.

    Returns the typed field map and one warning per dropped field. Label
    fields are only used for renaming and never appear in the output.
    """
    out: dict[str, FieldValue] = {}
    warnings: list[FieldWarning] = []

    for key, raw in fields.items():
        spec = FIELD_SPECS.get(key)
        if spec is None:
            if key.endswith(LABEL_SUFFIX):
                continue
            out_key, typed = key, raw
        else:
            out_key = key
            if spec.labelled:
                label = fields.get(key + LABEL_SUFFIX)
                if label is None:
                    warnings.append(FieldWarning(key, f"missing {key + LABEL_SUFFIX} field"))
                    continue
                out_key = label

            try:
                typed = convert_value(raw, spec.type)
            except FieldConversionError as exc:
                warnings.append(FieldWarning(key, str(exc)))
                continue

        if out_key in out:
            warnings.append(FieldWarning(key, f"output key [{out_key}] already set"))
            continue
        out[out_key] = typed

    return out, warnings
