from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class TextRange:
    """
    Half-open range [start, end) into source text.

    Invariant:
    - 0 <= start <= end

    Offsets are Python string indices, so slicing the source with a range
    yields exactly the covered text.
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < 0:
            raise ValueError("TextRange positions cannot be negative")
        if self.start > self.end:
            raise ValueError("TextRange invariant violated: start > end")

    @staticmethod
    def empty(offset: int) -> "TextRange":
        """Create an empty TextRange at the given offset."""
        return TextRange(offset, offset)

    def is_empty(self) -> bool:
        return self.start == self.end

    def as_tuple(self) -> tuple[int, int]:
        """Get the range as a tuple of (start, end) integers."""
        return (self.start, self.end)

    def contains_inclusive(self, offset: int) -> bool:
        """Check if the range contains the given offset, inclusive of end.

        Completion uses this form: a cursor sitting right after the last
        character of a token is still "on" that token.
        """
        return self.start <= offset <= self.end

    def contains_range(self, other: "TextRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def cover(self, other: "TextRange") -> "TextRange":
        """Get the minimal range that covers both this range and another range."""
        return TextRange(min(self.start, other.start), max(self.end, other.end))

    def __repr__(self) -> str:
        return f"TextRange({self.start}, {self.end})"


def cover_all(*ranges: "TextRange | None") -> TextRange | None:
    """Cover every non-None range, or return None when there is none."""
    result: TextRange | None = None
    for current in ranges:
        if current is None:
            continue
        result = current if result is None else result.cover(current)
    return result


def slice_text_range(source: str, range: TextRange) -> str:
    """Get the substring of the source text covered by the given TextRange."""
    return source[range.start : range.end]


def line_number(source: str, offset: int) -> int:
    """1-based line of an offset."""
    return source.count("\n", 0, offset) + 1
