# File: https_scout/report/sink.py
"""https_scout.report.sink: сериализованная точка записи строк результата."""

from __future__ import annotations

import threading
from typing import List, TextIO


class LineWriter:
    """Пишет целые строки в один или несколько потоков (tee), без перемешивания.

    Каждая строка записывается одной операцией под блокировкой и сразу
    сбрасывается, чтобы потребитель видел результаты по мере обхода.
    """

    def __init__(self, *streams: TextIO) -> None:
        if not streams:
            raise ValueError("LineWriter needs at least one stream")
        self._streams: List[TextIO] = list(streams)
        self._lock = threading.Lock()
        self.count = 0

    def write_line(self, line: str) -> None:
        data = line.rstrip("\r\n") + "\n"
        with self._lock:
            for stream in self._streams:
                stream.write(data)
                stream.flush()
            self.count += 1
