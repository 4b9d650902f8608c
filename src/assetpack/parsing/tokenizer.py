"""Line and token splitting shared by the .mtl and .obj parsers.

The tokenizer never mutates its input: it walks a cursor over the text and
hands back slices. A saved :attr:`Tokenizer.position` can be fed to a new
tokenizer to resume from the same spot.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..errors import SourceReadError, E_SOURCE_READ

__all__ = ["Tokenizer", "strip_comment", "iter_lines", "read_source_text"]

WHITESPACE = " \t"
COMMENT_CHAR = "#"


class Tokenizer:
    """Cursor over ``text`` yielding delimiter-separated tokens.

    With ``keep_empty=False`` runs of delimiters are collapsed, so only
    non-empty tokens come back. With ``keep_empty=True`` every delimiter ends
    a token, which is what line splitting needs to keep line numbers honest.
    ``next()`` returns ``None`` once the cursor reaches the end of the text.
    """

    __slots__ = ("text", "delimiters", "keep_empty", "_pos")

    def __init__(
        self,
        text: str,
        delimiters: str = WHITESPACE,
        *,
        keep_empty: bool = False,
        position: int = 0,
    ) -> None:
        self.text = text
        self.delimiters = delimiters
        self.keep_empty = keep_empty
        self._pos = position

    @property
    def position(self) -> int:
        return self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self.text)

    def next(self) -> Optional[str]:
        text, delims = self.text, self.delimiters
        end = len(text)
        pos = self._pos
        if not self.keep_empty:
            while pos < end and text[pos] in delims:
                pos += 1
        if pos >= end:
            self._pos = end
            return None
        start = pos
        while pos < end and text[pos] not in delims:
            pos += 1
        token = text[start:pos]
        # Step over the delimiter that terminated the token.
        self._pos = pos + 1 if pos < end else end
        return token

    def rest(self) -> List[str]:
        out: List[str] = []
        while (tok := self.next()) is not None:
            out.append(tok)
        return out

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        tok = self.next()
        if tok is None:
            raise StopIteration
        return tok


def strip_comment(line: str) -> str:
    cut = line.find(COMMENT_CHAR)
    return line if cut < 0 else line[:cut]


def iter_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` with comments and trailing CR removed."""
    lines = Tokenizer(text, "\n", keep_empty=True)
    for number, line in enumerate(lines, start=1):
        if line.endswith("\r"):
            line = line[:-1]
        yield number, strip_comment(line)


def read_source_text(path: str | Path) -> str:
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise SourceReadError(
            code=E_SOURCE_READ,
            message=f"Couldn't read {p}: {exc.strerror or exc}",
            context={"path": str(p)},
        ) from exc
    # Undecodable bytes become U+FFFD rather than failing the asset.
    return data.decode("utf-8", errors="replace")
