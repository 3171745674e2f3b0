"""Maps pipeline outcomes to process exit codes."""

from __future__ import annotations

import sys
import traceback
from typing import Any, TextIO


class ExitReporter:
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def success(self, result: Any = None) -> int:
        if isinstance(result, int) and not isinstance(result, bool):
            return result
        return 0

    def failure(self, exc: BaseException) -> int:
        stream = self._stream if self._stream is not None else sys.stderr
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=stream)
        stream.flush()
        return 1
