"""
Corpus parsing module
Splits a raw fortune blob into entries and computes their metrics
"""

import codecs
import re
from typing import List, Optional, Tuple
from nltk.tokenize import RegexpTokenizer

from .core import (
    DEFAULT_DELIMITER, EmptySegments, Entry, ParseError, TrimPolicy
)


LINE_BREAK = r'\r\n|\n|\r'


class CorpusParser:
    """Splits a delimited blob into Entry records"""

    def __init__(self,
                 delimiter: str = DEFAULT_DELIMITER,
                 trim: TrimPolicy = TrimPolicy.TRAILING_NEWLINE,
                 empty_segments: EmptySegments = EmptySegments.KEEP):
        if not delimiter:
            raise ValueError("Delimiter must be a non-empty string")

        self.delimiter = delimiter
        self.trim = trim
        self.empty_segments = empty_segments
        # A delimiter only counts at the start of a line; the line break
        # after it belongs to the delimiter line
        self._delimiter_re = re.compile(
            r'(?:^|(?<=\n)|(?<=\r))' + re.escape(delimiter)
            + f'(?:{LINE_BREAK})?'
        )
        self._trailing_re = re.compile(f'(?:{LINE_BREAK})\\Z')
        self.line_tokenizer = RegexpTokenizer(
            LINE_BREAK, gaps=True, discard_empty=False
        )

    def decode(self, raw_text) -> str:
        """
        Turn the host's blob into text.
        Bytes are read as UTF-16 when they carry a UTF-16 BOM, else UTF-8.
        """
        if isinstance(raw_text, (bytes, bytearray)):
            raw = bytes(raw_text)
            if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
                encoding = 'utf-16'
            else:
                encoding = 'utf-8-sig'
            try:
                return raw.decode(encoding)
            except UnicodeDecodeError as e:
                raise ParseError(f"Corpus is not valid {encoding}: {e}") from e

        if isinstance(raw_text, str):
            return raw_text[1:] if raw_text.startswith('\ufeff') else raw_text

        raise TypeError(
            f"Corpus must be str or bytes, got {type(raw_text).__name__}"
        )

    def split(self, text: str) -> List[Tuple[int, str]]:
        """
        Split text on the delimiter.
        Returns (offset, segment) pairs with segments already trimmed.
        """
        segments = []
        start = 0
        for match in self._delimiter_re.finditer(text):
            segments.append((start, text[start:match.start()]))
            start = match.end()

        tail = text[start:]
        # A trailing delimiter closes the last entry instead of opening one
        ends_with_delimiter = bool(segments) and not self._trim(tail)
        if not ends_with_delimiter:
            segments.append((start, tail))

        return [(offset, self._trim(segment)) for offset, segment in segments]

    def _trim(self, segment: str) -> str:
        if self.trim == TrimPolicy.TRAILING_NEWLINE:
            return self._trailing_re.sub('', segment, count=1)
        return segment

    def lines(self, text: str) -> List[str]:
        """Lines of text, empty lines kept"""
        return self.line_tokenizer.tokenize(text)

    def measure(self, text: str) -> Tuple[int, int, int]:
        """Return (length, width, height) for a piece of text"""
        lines = self.lines(text)
        width = max(len(line) for line in lines)
        return len(text), width, len(lines)

    def parse(self, raw_text, source: Optional[str] = None) -> List[Entry]:
        """
        Parse a raw blob into entries, in file order.
        Raises ParseError for an empty blob or one without any content.
        """
        text = self.decode(raw_text)
        label = f" '{source}'" if source else ""
        if not text:
            raise ParseError(f"Corpus{label} is empty")

        segments = self.split(text)
        if not any(segment for _, segment in segments):
            raise ParseError(f"Corpus{label} contains no fortunes")

        entries = []
        for offset, segment in segments:
            if not segment and self.empty_segments == EmptySegments.SKIP:
                continue
            length, width, height = self.measure(segment)
            entries.append(Entry(
                text=segment,
                length=length,
                width=width,
                height=height,
                source=source,
                offset=offset,
            ))

        return entries
