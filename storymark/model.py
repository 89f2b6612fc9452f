from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional

from .attributes import (
    SCHEMA,
    AttributeKey,
    InvalidationCondition,
    inherited_attributes,
    keys_invalidated_by,
)


class RangeError(IndexError):
    """A position or range fell outside ``[0, character_count]``."""


def _shift_for_delete(position: int, start: int, end: int) -> int:
    """Map a position across the deletion of ``[start, end)``."""
    if position <= start:
        return position
    if position <= end:
        return start
    return position - (end - start)


def _checked(attributes: Mapping[Any, Any]) -> dict[AttributeKey, Any]:
    checked: dict[AttributeKey, Any] = {}
    for key, value in attributes.items():
        key = AttributeKey(key)
        if value is None:
            continue
        SCHEMA[key].validate(value)
        checked[key] = value
    return checked


@dataclass(frozen=True)
class Run:
    start: int
    end: int
    attributes: dict = field(default_factory=dict)

    @property
    def range(self) -> tuple[int, int]:
        return (self.start, self.end)

    def get(self, key: AttributeKey) -> Optional[Any]:
        return self.attributes.get(AttributeKey(key))

    def __len__(self) -> int:
        return self.end - self.start


@dataclass
class Selection:
    """Half-open range over character positions; a caret when empty."""

    start: int = 0
    end: int = 0

    def __post_init__(self):
        if self.start > self.end:
            self.start, self.end = self.end, self.start

    @classmethod
    def caret(cls, position: int) -> "Selection":
        return cls(position, position)

    @property
    def is_caret(self) -> bool:
        return self.start == self.end

    def clamped(self, count: int) -> "Selection":
        return Selection(min(max(self.start, 0), count), min(max(self.end, 0), count))

    def after_insert(self, position: int, length: int) -> "Selection":
        """Shift boundaries at or after position by the inserted length."""
        start = self.start + length if self.start >= position else self.start
        end = self.end + length if self.end >= position else self.end
        return Selection(start, end)

    def after_delete(self, start: int, end: int) -> "Selection":
        return Selection(
            _shift_for_delete(self.start, start, end),
            _shift_for_delete(self.end, start, end),
        )


@dataclass
class _Segment:
    length: int
    attributes: dict


class AttributedText:
    """Characters partitioned into maximal runs of equal attributes.

    Empty text has no runs. Every mutating method validates its arguments
    before touching any state, so a failed call leaves the text unchanged.
    """

    def __init__(self, text: str = "", attributes: Optional[Mapping] = None):
        self._text = text
        checked = _checked(attributes or {})
        self._segments: list[_Segment] = [_Segment(len(text), checked)] if text else []
        self._mutations = 0

    @classmethod
    def from_runs(cls, pairs: Iterable[tuple[str, Mapping]]) -> "AttributedText":
        """Build text from ``(text, attributes)`` pairs, merging equal neighbours."""
        result = cls()
        chunks = []
        for text, attributes in pairs:
            checked = _checked(attributes)
            if not text:
                continue
            chunks.append(text)
            result._segments.append(_Segment(len(text), checked))
        result._text = "".join(chunks)
        result._coalesce(0, len(result._segments))
        return result

    # --- Queries ---

    @property
    def text(self) -> str:
        return self._text

    def character_count(self) -> int:
        return len(self._text)

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributedText):
            return NotImplemented
        return self._text == other._text and self._segments == other._segments

    def __repr__(self) -> str:
        pieces = [
            (self._text[run.start:run.end], {k.value: v for k, v in run.attributes.items()})
            for run in self.runs()
        ]
        return f"AttributedText({pieces!r})"

    def copy(self) -> "AttributedText":
        return AttributedText.from_runs(
            (self._text[run.start:run.end], run.attributes) for run in self.runs()
        )

    def runs(self, start: Optional[int] = None, end: Optional[int] = None) -> Iterator[Run]:
        """Iterate the runs intersecting ``[start, end)``, clipped to it.

        The iterator is invalidated by any mutation of the text; continuing
        it afterwards raises RuntimeError.
        """
        start = 0 if start is None else start
        end = len(self._text) if end is None else end
        self._check_range(start, end)
        return self._iter_runs(start, end, self._mutations)

    def _iter_runs(self, start: int, end: int, mutations: int) -> Iterator[Run]:
        offset = 0
        for segment in self._segments:
            self._check_unchanged(mutations)
            seg_start, seg_end = offset, offset + segment.length
            offset = seg_end
            run_start, run_end = max(seg_start, start), min(seg_end, end)
            if run_start < run_end:
                yield Run(run_start, run_end, dict(segment.attributes))
                self._check_unchanged(mutations)
            elif seg_start >= end:
                break

    def _check_unchanged(self, mutations: int) -> None:
        if self._mutations != mutations:
            raise RuntimeError("AttributedText mutated during run iteration")

    def attributes_at(self, position: int) -> dict:
        self._check_position(position)
        index, _ = self._locate(position)
        if index == len(self._segments):
            return {}
        return dict(self._segments[index].attributes)

    def get_attribute(self, position: int, key: AttributeKey) -> Optional[Any]:
        return self.attributes_at(position).get(AttributeKey(key))

    def slice(self, start: int, end: int) -> "AttributedText":
        self._check_range(start, end)
        return AttributedText.from_runs(
            (self._text[run.start:run.end], run.attributes)
            for run in self.runs(start, end)
        )

    # --- Mutations ---

    def set_attributes(self, start: int, end: int, key: AttributeKey, value: Any) -> None:
        """Set ``key`` to ``value`` on ``[start, end)``; ``None`` removes it."""
        self._check_range(start, end)
        key = AttributeKey(key)
        if value is not None:
            SCHEMA[key].validate(value)
        if start == end:
            return
        first = self._split_at(start)
        last = self._split_at(end)
        for segment in self._segments[first:last]:
            attributes = dict(segment.attributes)
            if value is None:
                attributes.pop(key, None)
            else:
                attributes[key] = value
            segment.attributes = attributes
        self._coalesce(first - 1, last + 1)
        self._mutations += 1

    def insert(self, text: str, position: int) -> None:
        """Insert plain text, inheriting only the inheritable neighbour attributes."""
        self._check_position(position)
        if not text:
            return
        if position > 0:
            neighbour = self.attributes_at(position - 1)
        else:
            neighbour = self.attributes_at(position)
        segment = _Segment(len(text), inherited_attributes(neighbour))
        self._splice(position, text, [segment])

    def insert_attributed(self, other: "AttributedText", position: int) -> None:
        self._check_position(position)
        if not other._text:
            return
        segments = [_Segment(s.length, dict(s.attributes)) for s in other._segments]
        self._splice(position, other._text, segments)

    def append(self, other: "AttributedText") -> None:
        self.insert_attributed(other, len(self._text))

    def delete_range(self, start: int, end: int) -> None:
        self._check_range(start, end)
        if start == end:
            return
        touched = [
            (key, span_start, span_end)
            for key, span_start, span_end in self._invalidating_spans()
            if span_start < end and span_end > start
        ]
        first = self._split_at(start)
        last = self._split_at(end)
        del self._segments[first:last]
        self._text = self._text[:start] + self._text[end:]
        self._coalesce(first - 1, first + 1)
        self._mutations += 1
        for key, span_start, span_end in touched:
            new_start = _shift_for_delete(span_start, start, end)
            new_end = _shift_for_delete(span_end, start, end)
            if new_start < new_end:
                self.set_attributes(new_start, new_end, key, None)

    # --- Internals ---

    def _check_position(self, position: int) -> None:
        if not 0 <= position <= len(self._text):
            raise RangeError(
                f"position {position} outside [0, {len(self._text)}]"
            )

    def _check_range(self, start: int, end: int) -> None:
        self._check_position(start)
        self._check_position(end)
        if start > end:
            raise RangeError(f"range start {start} is after end {end}")

    def _locate(self, position: int) -> tuple[int, int]:
        """Return (segment index, offset within segment) of a character."""
        offset = 0
        for index, segment in enumerate(self._segments):
            if position < offset + segment.length:
                return index, position - offset
            offset += segment.length
        return len(self._segments), 0

    def _split_at(self, position: int) -> int:
        """Make position a segment boundary; return the index starting there."""
        index, within = self._locate(position)
        if within:
            segment = self._segments[index]
            self._segments[index:index + 1] = [
                _Segment(within, dict(segment.attributes)),
                _Segment(segment.length - within, dict(segment.attributes)),
            ]
            index += 1
        return index

    def _coalesce(self, lo: int, hi: int) -> None:
        """Merge equal neighbours and drop empty segments in ``[lo, hi)``."""
        lo = max(lo, 0)
        hi = min(hi, len(self._segments))
        merged: list[_Segment] = []
        for segment in self._segments[lo:hi]:
            if not segment.length:
                continue
            if merged and merged[-1].attributes == segment.attributes:
                merged[-1] = _Segment(merged[-1].length + segment.length, merged[-1].attributes)
            else:
                merged.append(segment)
        self._segments[lo:hi] = merged

    def _invalidating_spans(self) -> list[tuple[AttributeKey, int, int]]:
        """Maximal spans of equal value for keys invalidated by text changes."""
        spans: list[tuple[AttributeKey, int, int]] = []
        for key in keys_invalidated_by(InvalidationCondition.TEXT_CHANGED):
            current: Optional[list] = None
            offset = 0
            for segment in self._segments:
                value = segment.attributes.get(key)
                seg_end = offset + segment.length
                if value is not None and current and current[1] == offset and current[2] == value:
                    current[1] = seg_end
                elif value is not None:
                    if current:
                        spans.append((key, current[0], current[1]))
                    current = [offset, seg_end, value]
                offset = seg_end
            if current:
                spans.append((key, current[0], current[1]))
        return spans

    def _splice(self, position: int, text: str, segments: list[_Segment]) -> None:
        touched = [
            (key, span_start, span_end)
            for key, span_start, span_end in self._invalidating_spans()
            if span_start < position < span_end
        ]
        index = self._split_at(position)
        self._segments[index:index] = segments
        self._text = self._text[:position] + text + self._text[position:]
        self._coalesce(index - 1, index + len(segments) + 1)
        self._mutations += 1
        for key, span_start, span_end in touched:
            self.set_attributes(span_start, span_end + len(text), key, None)
