"""
Streaming line counter.

Counts lines by looking for a single terminator byte instead of decoding
text. The first CR or LF in a file decides which byte counts as a line
break for the rest of that file, so CRLF files are counted once per pair.
Files that mix conventions get an approximate count.
"""

import logging
from pathlib import Path

from koala_tracker.core.interfaces import ILineCounter

logger = logging.getLogger(__name__)

CR = 0x0D
LF = 0x0A
NUL = 0x00

DEFAULT_CHUNK_SIZE = 1024 * 1024


class LineCounter(ILineCounter):
    """Counts lines in a file by streaming it in fixed-size binary chunks."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def count_lines(self, file_path: Path) -> int:
        with open(file_path, 'rb') as stream:
            return self.count_stream(stream)

    def count_stream(self, stream) -> int:
        """
        Count lines in an open binary stream.

        Args:
            stream: Object with a read(size) method returning bytes

        Returns:
            Number of detected terminators, plus one if the data ends with
            a byte other than CR, LF or NUL
        """
        line_count = 0
        detected_eol: int | None = None
        last_byte = NUL

        while chunk := stream.read(self.chunk_size):
            if detected_eol is None:
                cr_at = chunk.find(CR)
                lf_at = chunk.find(LF)
                positions = [p for p in (cr_at, lf_at) if p >= 0]
                if positions:
                    first = min(positions)
                    detected_eol = chunk[first]
                    line_count += 1 + chunk.count(detected_eol, first + 1)
            else:
                line_count += chunk.count(detected_eol)
            last_byte = chunk[-1]

        # trailing line without terminator; both CR and LF end a line here
        if last_byte not in (CR, LF, NUL):
            line_count += 1

        logger.debug("Counted %d lines (terminator=%r)", line_count, detected_eol)
        return line_count
