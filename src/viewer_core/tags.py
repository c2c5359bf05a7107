# src/viewer_core/tags.py
"""
DICOM tag flattening for the tags dialog.

Converts the engine's metadata dictionary into a flat list of display
rows (name, value) that can be searched and shown in a two-column table.

Input shape (one entry per element, keyed by 8-hex-digit tag):

    {
        "00100010": {"vr": "PN", "value": "Doe^Jane"},
        "00081115": {"vr": "SQ", "value": [{...nested record...}, ...]},
        "00200032": {"vr": "DS", "value": {"1": [...], "2": [...]}},  # per instance
    }

Rules (structured DICOM metadata):
1. Names come from the pydicom data dictionary; unknown tags show as
   "x" + tag (e.g. "x00091001").
2. Per-instance values are resolved at the selected instance index.
3. InstanceNumber always shows the selected instance index.
4. SQ elements emit a heading row, then their items with a "[i]" prefix.
5. PixelData is never shown, at any depth.
6. "O*" VRs (OB, OW, OF...) longer than 10 items show the first 10 only.
7. Every value string is capped at 200 characters.

Row order follows the dictionary's own key order. Never re-sorted.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np
from pydicom.dataset import Dataset
from pydicom.datadict import keyword_for_tag
from pydicom.multival import MultiValue
from pydicom.valuerep import PersonName

from .config import DEFAULT_CONFIG, ViewerConfig

logger = logging.getLogger(__name__)

NameLookup = Callable[[str], Optional[str]]

_BUFFER_TYPES = (str, bytes, bytearray, memoryview, np.ndarray)
_SCALAR_TYPES = (int, float, bool, np.generic)


# ═══════════════════════════════════════════════════════════════════════════════
# ROW & NODE TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DisplayRow:
    """One row of the tags table."""
    name: str
    value: str


@dataclass(frozen=True)
class TagLeaf:
    """Resolved non-sequence element, value already rendered."""
    name: str
    value: str


@dataclass(frozen=True)
class TagSequence:
    """Resolved SQ element; items are nested tag records."""
    name: str
    items: List[Any] = field(default_factory=list)


TagNode = Union[TagLeaf, TagSequence]


# ═══════════════════════════════════════════════════════════════════════════════
# VALUE RENDERING
# ═══════════════════════════════════════════════════════════════════════════════

def truncate_text(text: str, limit: int = DEFAULT_CONFIG.max_value_length) -> str:
    """Cap text at `limit` characters, recording the original length."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... (len:{len(text)})"


def render_value(value: Any) -> str:
    """
    Text form of an element value.

    Multi-values and binary buffers are comma-joined ("1,2,3"), the way
    the viewer has always displayed them.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ",".join(str(b) for b in bytes(value))
    if isinstance(value, np.ndarray):
        return ",".join(str(v) for v in value.ravel().tolist())
    if isinstance(value, Mapping):
        return str(dict(value))
    if isinstance(value, Sequence):
        return ",".join(render_value(v) for v in value)
    return str(value)


def _value_length(value: Any) -> Optional[int]:
    if isinstance(value, np.ndarray):
        return int(value.size)
    try:
        return len(value)
    except TypeError:
        return None


def _head(value: Any, count: int) -> Any:
    if isinstance(value, np.ndarray):
        return value.ravel()[:count]
    if isinstance(value, (str, bytes, bytearray)):
        return value[:count]
    if isinstance(value, memoryview):
        return bytes(value)[:count]
    return list(value)[:count]


def render_binary(value: Any, max_items: int = DEFAULT_CONFIG.max_binary_items) -> str:
    """Render only the first `max_items` entries of a long binary value."""
    length = _value_length(value)
    if length is None or length <= max_items:
        return render_value(value)
    return f"{render_value(_head(value, max_items))}... (len:{length})"


def resolve_instance_value(value: Any, instance_selector: int) -> Any:
    """
    Pick the per-instance entry of a value that varies across a series.

    Scalars and contiguous buffers (strings, bytes, lists, arrays) are
    returned untouched; only keyed containers are indexed.
    """
    if value is None or isinstance(value, _SCALAR_TYPES + _BUFFER_TYPES):
        return value
    if isinstance(value, Mapping):
        for key in (instance_selector, str(instance_selector)):
            if key in value:
                return value[key]
        return value
    if isinstance(value, Sequence):
        return value
    if hasattr(value, '__getitem__'):
        try:
            return value[instance_selector]
        except (KeyError, IndexError, TypeError):
            return value
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# DICTIONARY LOOKUP
# ═══════════════════════════════════════════════════════════════════════════════

def dictionary_name(key: str) -> Optional[str]:
    """pydicom keyword for an 8-hex-digit tag, or None when unknown."""
    try:
        return keyword_for_tag(int(str(key), 16)) or None
    except (ValueError, OverflowError):
        return None


def is_dicom_meta(record: Mapping, config: ViewerConfig = DEFAULT_CONFIG) -> bool:
    """Metadata carrying a TransferSyntaxUID is structured DICOM metadata."""
    return config.transfer_syntax_tag in record


def _element_parts(element: Any) -> tuple:
    """(vr, value) of an element record; tolerates bare values."""
    if isinstance(element, Mapping):
        vr = element.get('vr', element.get('valueRepresentation'))
        return (str(vr) if vr else ''), element.get('value')
    return '', element


def _join_name(prefix: str, name: str) -> str:
    return f"{prefix} {name}" if prefix else name


# ═══════════════════════════════════════════════════════════════════════════════
# FLATTENER
# ═══════════════════════════════════════════════════════════════════════════════

_DONE = object()


class TagFlattener:
    """
    Flattens tag dictionaries into display rows.

    Usage:
        flattener = TagFlattener()
        rows = flattener.flatten(metadata, instance_selector=3)
    """

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        name_lookup: Optional[NameLookup] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.name_lookup = name_lookup or dictionary_name

    def flatten(
        self,
        record: Optional[Mapping],
        instance_selector: int = 0,
        is_structured_meta: Optional[bool] = None,
    ) -> List[DisplayRow]:
        """
        Flatten a metadata dictionary.

        Args:
            record: tag dictionary (or plain key/value metadata)
            instance_selector: index of the instance to display
            is_structured_meta: force structured/plain mode; detected
                from the TransferSyntaxUID element when None

        Returns:
            Rows in the dictionary's own key order
        """
        if not record:
            return []
        if is_structured_meta is None:
            is_structured_meta = is_dicom_meta(record, self.config)
        if not is_structured_meta:
            return self._flatten_plain(record)
        return self._flatten_structured(record, instance_selector)

    def _is_pixel_data(self, key: str, name: Optional[str] = None) -> bool:
        return (
            str(key).upper() == self.config.pixel_data_tag
            or key == self.config.pixel_data_keyword
            or name == self.config.pixel_data_keyword
        )

    def _flatten_plain(self, record: Mapping) -> List[DisplayRow]:
        rows = []
        for key, entry in record.items():
            if self._is_pixel_data(key):
                continue
            value = entry.get('value') if isinstance(entry, Mapping) and 'value' in entry else entry
            rows.append(DisplayRow(
                name=str(key),
                value=truncate_text(render_value(value), self.config.max_value_length),
            ))
        return rows

    def _flatten_structured(self, record: Mapping, instance_selector: int) -> List[DisplayRow]:
        rows: List[DisplayRow] = []
        # Work stack of (record, key iterator, prefix); depth follows the data
        stack = [(record, iter(list(record.keys())), '')]

        while stack:
            current, keys, prefix = stack[-1]
            key = next(keys, _DONE)
            if key is _DONE:
                stack.pop()
                continue

            node = self.resolve_node(key, current[key], instance_selector, prefix)
            if node is None:
                continue

            if isinstance(node, TagSequence):
                rows.append(DisplayRow(name=node.name, value=''))
                # Push in reverse so item 0 is walked first
                for index in reversed(range(len(node.items))):
                    item = node.items[index]
                    if not isinstance(item, Mapping):
                        logger.debug("Skipping non-record item %d of %s", index, node.name)
                        continue
                    stack.append((item, iter(list(item.keys())), f"{prefix}[{index}]"))
            else:
                rows.append(DisplayRow(name=node.name, value=node.value))

        return rows

    def resolve_node(
        self,
        key: str,
        element: Any,
        instance_selector: int,
        prefix: str = '',
    ) -> Optional[TagNode]:
        """
        Resolve one element into a tree node, or None when it is hidden.
        """
        name = self.name_lookup(key)
        if not name:
            name = f"x{key}"
        if self._is_pixel_data(key, name):
            return None

        vr, value = _element_parts(element)
        value = resolve_instance_value(value, instance_selector)

        if name == self.config.instance_number_keyword:
            value = instance_selector

        if vr == 'SQ':
            if isinstance(value, Sequence) and not isinstance(value, _BUFFER_TYPES):
                items = list(value)
            else:
                items = []
            return TagSequence(name=_join_name(prefix, name), items=items)

        if vr.startswith('O'):
            text = render_binary(value, self.config.max_binary_items)
        else:
            text = render_value(value)
        return TagLeaf(
            name=_join_name(prefix, name),
            value=truncate_text(text, self.config.max_value_length),
        )


def flatten_tags(
    record: Optional[Mapping],
    instance_selector: int = 0,
    is_structured_meta: Optional[bool] = None,
    config: Optional[ViewerConfig] = None,
) -> List[DisplayRow]:
    """Convenience wrapper around TagFlattener.flatten()."""
    return TagFlattener(config).flatten(record, instance_selector, is_structured_meta)


# ═══════════════════════════════════════════════════════════════════════════════
# INSTANCE NUMBERS
# ═══════════════════════════════════════════════════════════════════════════════

def _as_number(value: Any) -> Optional[Union[int, float]]:
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if number != number:  # NaN
        return None
    return int(number) if number.is_integer() else number


def instance_numbers(record: Optional[Mapping], config: ViewerConfig = DEFAULT_CONFIG) -> List[Union[int, float]]:
    """
    Sorted numeric InstanceNumber values of a series.

    A single scalar or string value counts as one instance; non-numeric
    values are dropped.
    """
    if not record or config.instance_number_tag not in record:
        return []
    _, values = _element_parts(record[config.instance_number_tag])
    if values is None:
        return []
    if isinstance(values, Mapping):
        values = list(values.values())
    elif isinstance(values, (str, bytes, bytearray)) or not isinstance(values, (Sequence, np.ndarray)):
        values = [values]
    elif isinstance(values, np.ndarray):
        values = values.ravel().tolist()

    numbers = [n for n in (_as_number(v) for v in values) if n is not None]
    numbers.sort()
    return numbers


@dataclass
class InstanceSelector:
    """
    Slider model over a series' instance numbers.

    `index` is the slider position; `instance_number` the real value shown
    next to it and passed to the flattener.
    """
    numbers: List[Union[int, float]] = field(default_factory=list)
    index: int = 0

    @classmethod
    def from_record(cls, record: Optional[Mapping], config: ViewerConfig = DEFAULT_CONFIG) -> 'InstanceSelector':
        return cls(numbers=instance_numbers(record, config))

    @property
    def minimum(self) -> int:
        return 0

    @property
    def maximum(self) -> int:
        return max(0, len(self.numbers) - 1)

    @property
    def instance_number(self) -> Union[int, float]:
        if not self.numbers:
            return 0
        return self.numbers[self.index]

    def select(self, index: int) -> Union[int, float]:
        """Move the slider; out-of-range positions are clamped."""
        self.index = max(self.minimum, min(self.maximum, int(index)))
        return self.instance_number


# ═══════════════════════════════════════════════════════════════════════════════
# PYDICOM CONVERSION
# ═══════════════════════════════════════════════════════════════════════════════

def tag_key(tag: int) -> str:
    """8-hex-digit upper-case key for a tag, e.g. 0x00100010 -> "00100010"."""
    return f"{int(tag):08X}"


def _plain_value(value: Any) -> Any:
    if isinstance(value, MultiValue):
        return [_plain_value(v) for v in value]
    if isinstance(value, PersonName):
        return str(value)
    return value


def dataset_to_tag_dict(ds: Dataset, include_file_meta: bool = True) -> Dict[str, Dict[str, Any]]:
    """
    Convert a pydicom Dataset into the tag-dictionary shape.

    File meta elements come first (as the engine reports them), then the
    dataset's elements in tag order. Sequences become lists of nested
    dictionaries.
    """
    record: Dict[str, Dict[str, Any]] = {}

    file_meta = getattr(ds, 'file_meta', None) if include_file_meta else None
    if file_meta is not None:
        for elem in file_meta:
            record[tag_key(elem.tag)] = {'vr': elem.VR, 'value': _plain_value(elem.value)}

    for elem in ds:
        if elem.VR == 'SQ':
            value = [dataset_to_tag_dict(item, include_file_meta=False) for item in elem.value]
        else:
            value = _plain_value(elem.value)
        record[tag_key(elem.tag)] = {'vr': elem.VR, 'value': value}

    return record
