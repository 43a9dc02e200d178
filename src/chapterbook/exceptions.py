"""Custom exceptions for chapterbook."""


class ChapterbookError(Exception):
    """Base exception for chapterbook operations."""


class MalformedContentError(ChapterbookError):
    """A document's heading hierarchy contains an invalid level jump."""

    def __init__(
        self,
        title: str,
        block_index: int,
        level: int,
        previous_level: int,
    ) -> None:
        self.title = title
        self.block_index = block_index
        self.level = level
        self.previous_level = previous_level
        super().__init__(
            f"{title!r}: heading at block {block_index} jumps from "
            f"h{previous_level} to h{level}"
        )


class SourceError(ChapterbookError):
    """A document source could not be read or parsed."""


class ManifestError(ChapterbookError):
    """The book manifest is missing or invalid."""
