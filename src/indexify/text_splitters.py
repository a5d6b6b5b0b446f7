"""Text splitting strategies.

A splitter turns one document into an ordered list of chunks. Every
index records the name of its splitter so a loaded index splits new
documents the same way the index was designed for.
"""

from abc import ABC, abstractmethod
from enum import Enum

from indexify.exceptions import TextSplitterError, ValidationError
from indexify.logger import get_logger

logger = get_logger(__name__)


class TextSplitterKind(str, Enum):
    """Known text splitter variants, persisted by value."""

    NOOP = "noop"
    NEW_LINE = "new_line"
    CHARACTER = "character"

    @classmethod
    def parse(cls, name: "str | TextSplitterKind") -> "TextSplitterKind":
        """Resolve a splitter name, ignoring case (e.g., "Noop").

        Raises:
            ValidationError: If the name is not a known variant.
        """
        if isinstance(name, cls):
            return name
        normalized = str(name).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(f"unknown text splitter `{name}`") from None


class TextSplitter(ABC):
    """Abstract base class for text splitting strategies."""

    @abstractmethod
    def split(self, document: str, max_chunk_size: int, overlap: int) -> list[str]:
        """Split a document into chunks.

        Args:
            document: Source text.
            max_chunk_size: Target maximum chunk size in characters.
            overlap: Characters shared by consecutive chunks.

        Returns:
            Ordered chunks.

        Raises:
            TextSplitterError: If the size parameters are invalid.
        """
        pass

    @property
    @abstractmethod
    def kind(self) -> TextSplitterKind:
        pass

    @staticmethod
    def _check_sizes(max_chunk_size: int, overlap: int) -> None:
        if max_chunk_size <= 0:
            raise TextSplitterError(
                f"max_chunk_size must be positive, got {max_chunk_size}"
            )
        if overlap < 0 or overlap >= max_chunk_size:
            raise TextSplitterError(
                f"overlap must be in [0, {max_chunk_size}), got {overlap}"
            )


class NoopTextSplitter(TextSplitter):
    """Returns the document unchanged as a single chunk."""

    @property
    def kind(self) -> TextSplitterKind:
        return TextSplitterKind.NOOP

    def split(self, document: str, max_chunk_size: int, overlap: int) -> list[str]:
        return [document]


class NewLineTextSplitter(TextSplitter):
    """Packs whole lines into chunks of at most max_chunk_size characters.

    Lines longer than max_chunk_size become chunks of their own. Blank
    lines are dropped. Overlap is ignored since chunks never cut a line.
    """

    @property
    def kind(self) -> TextSplitterKind:
        return TextSplitterKind.NEW_LINE

    def split(self, document: str, max_chunk_size: int, overlap: int) -> list[str]:
        self._check_sizes(max_chunk_size, overlap)

        chunks: list[str] = []
        current: list[str] = []
        current_len = 0
        for line in document.splitlines():
            line = line.strip()
            if not line:
                continue
            added = len(line) + (1 if current else 0)
            if current and current_len + added > max_chunk_size:
                chunks.append("\n".join(current))
                current, current_len = [], 0
                added = len(line)
            current.append(line)
            current_len += added

        if current:
            chunks.append("\n".join(current))
        return chunks


class CharacterTextSplitter(TextSplitter):
    """Sliding window of max_chunk_size characters with overlap."""

    @property
    def kind(self) -> TextSplitterKind:
        return TextSplitterKind.CHARACTER

    def split(self, document: str, max_chunk_size: int, overlap: int) -> list[str]:
        self._check_sizes(max_chunk_size, overlap)

        if not document:
            return []

        step = max_chunk_size - overlap
        chunks: list[str] = []
        for start in range(0, len(document), step):
            chunks.append(document[start : start + max_chunk_size])
            if start + max_chunk_size >= len(document):
                break
        return chunks


_SPLITTERS: dict[TextSplitterKind, type[TextSplitter]] = {
    TextSplitterKind.NOOP: NoopTextSplitter,
    TextSplitterKind.NEW_LINE: NewLineTextSplitter,
    TextSplitterKind.CHARACTER: CharacterTextSplitter,
}


def get_splitter(kind: "str | TextSplitterKind") -> TextSplitter:
    """Instantiate the splitter for a kind or kind name.

    Raises:
        ValidationError: If the kind is not supported.
    """
    resolved = TextSplitterKind.parse(kind)
    logger.debug("Resolved text splitter: %s", resolved.value)
    return _SPLITTERS[resolved]()
