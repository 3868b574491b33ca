"""Route path pattern parsing, matching, and overlap analysis.

A pattern is a `/`-separated list of segments. Each segment is one of:

- a literal such as `items`,
- a named parameter such as `{item_id}`, matching one non-empty segment,
- a trailing wildcard such as `{rest:path}`, matching the remaining
  segments (zero or more) joined with `/`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from .errors import RouteRegistrationError

SEGMENT_LITERAL: Final[str] = "literal"
SEGMENT_PARAMETER: Final[str] = "parameter"
SEGMENT_WILDCARD: Final[str] = "wildcard"

_PARAMETER_SEGMENT_PATTERN = re.compile(r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<wildcard>:path)?\}$")


@dataclass(frozen=True)
class PatternSegment:
    """One parsed pattern segment.

    Attributes:
        kind: `literal`, `parameter`, or `wildcard`.
        value: Literal text or the parameter name.
    """

    kind: str
    value: str


@dataclass(frozen=True)
class RoutePattern:
    """Parsed, immutable route path pattern.

    Attributes:
        raw_pattern: Pattern text as registered.
        segments: Parsed segments in path order.
    """

    raw_pattern: str
    segments: tuple[PatternSegment, ...]

    @property
    def normalized(self) -> str:
        """Pattern text with parameter names erased, used for duplicate detection."""

        rendered_segments = []
        for segment in self.segments:
            if segment.kind == SEGMENT_LITERAL:
                rendered_segments.append(segment.value)
            elif segment.kind == SEGMENT_PARAMETER:
                rendered_segments.append("{}")
            else:
                rendered_segments.append("{*}")
        return "/" + "/".join(rendered_segments)

    @property
    def parameter_count(self) -> int:
        return sum(1 for segment in self.segments if segment.kind != SEGMENT_LITERAL)

    @property
    def has_wildcard(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind == SEGMENT_WILDCARD

    def pattern_specificity(self) -> tuple[int, int]:
        """Return the ordering key where smaller means more specific.

        Returns:
            tuple[int, int]: Parameter segment count, then 1 for a trailing wildcard.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return self.parameter_count, int(self.has_wildcard)

    def pattern_match(self, path_segments: tuple[str, ...]) -> dict[str, str] | None:
        """Match split path segments against this pattern.

        Args:
            path_segments: Output of `routing_split_path`.

        Returns:
            dict[str, str] | None: Captured parameters, or None when the path does not match.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if not self.has_wildcard and len(path_segments) != len(self.segments):
            return None

        captured: dict[str, str] = {}
        for index, segment in enumerate(self.segments):
            if segment.kind == SEGMENT_WILDCARD:
                captured[segment.value] = "/".join(path_segments[index:])
                return captured
            if index >= len(path_segments):
                return None
            path_segment = path_segments[index]
            if segment.kind == SEGMENT_LITERAL:
                if path_segment != segment.value:
                    return None
            else:
                captured[segment.value] = path_segment
        return captured

    def pattern_overlaps(self, other: RoutePattern) -> bool:
        """Return whether some concrete path matches both patterns.

        Args:
            other: Pattern to compare against.

        Returns:
            bool: True when the patterns can match a common path.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        left_segments = self.segments
        right_segments = other.segments
        for index in range(max(len(left_segments), len(right_segments))):
            left = left_segments[index] if index < len(left_segments) else None
            right = right_segments[index] if index < len(right_segments) else None
            if (left is not None and left.kind == SEGMENT_WILDCARD) or (
                right is not None and right.kind == SEGMENT_WILDCARD
            ):
                return True
            if left is None or right is None:
                return False
            if left.kind == SEGMENT_LITERAL and right.kind == SEGMENT_LITERAL and left.value != right.value:
                return False
        return True


def routing_split_path(path: str) -> tuple[str, ...]:
    """Split a request path into non-empty segments.

    Empty segments are dropped, so `/items/`, `//items` and `/items` are
    equivalent. The root path splits into an empty tuple.

    Args:
        path: Decoded request path.

    Returns:
        tuple[str, ...]: Path segments in order.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return tuple(segment for segment in path.split("/") if segment)


def routing_parse_pattern(pattern: str) -> RoutePattern:
    """Parse and validate one route pattern.

    Args:
        pattern: Pattern text such as `/items/{item_id}`.

    Returns:
        RoutePattern: Parsed pattern.

    Raises:
        RouteRegistrationError: Raised for malformed patterns, repeated parameter names,
            or a wildcard that is not the last segment.
    """

    if not isinstance(pattern, str) or not pattern.startswith("/"):
        raise RouteRegistrationError(f"route pattern must start with '/': {pattern!r}")

    raw_segments = routing_split_path(pattern)
    segments: list[PatternSegment] = []
    seen_names: set[str] = set()
    for index, raw_segment in enumerate(raw_segments):
        parameter_match = _PARAMETER_SEGMENT_PATTERN.match(raw_segment)
        if parameter_match is None:
            if "{" in raw_segment or "}" in raw_segment:
                raise RouteRegistrationError(
                    f"route pattern {pattern!r} has a malformed parameter segment {raw_segment!r}"
                )
            segments.append(PatternSegment(kind=SEGMENT_LITERAL, value=raw_segment))
            continue

        name = parameter_match.group("name")
        if name in seen_names:
            raise RouteRegistrationError(f"route pattern {pattern!r} repeats parameter name {name!r}")
        seen_names.add(name)

        if parameter_match.group("wildcard"):
            if index != len(raw_segments) - 1:
                raise RouteRegistrationError(f"route pattern {pattern!r} declares a wildcard before the last segment")
            segments.append(PatternSegment(kind=SEGMENT_WILDCARD, value=name))
        else:
            segments.append(PatternSegment(kind=SEGMENT_PARAMETER, value=name))

    return RoutePattern(raw_pattern=pattern, segments=tuple(segments))
