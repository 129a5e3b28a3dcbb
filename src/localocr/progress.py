# localocr/progress.py
from __future__ import annotations

from typing import Optional

from .config import PROGRESS_MODES
from .models import ProgressEvent

RECOGNIZING_STATUS = "recognizing text"


class ProgressAggregator:
    """
    Maps engine progress events to the single percentage shown for the batch.

    per_call: the fraction of the running recognition call, scaled to 0-100.
        The indicator starts over with every recognition call, so it is not
        monotonic across pages or files.
    weighted: the fraction is placed inside the current page's slot of the
        current file's slot of the queue, giving a monotonic indicator.
    """

    def __init__(self, mode: str = "per_call"):
        if mode not in PROGRESS_MODES:
            raise ValueError(f"Unknown progress mode: '{mode}'. Supported modes: {list(PROGRESS_MODES)}")
        self.mode = mode
        self.file_index = 0
        self.total_files = 1
        self.page_index = 1
        self.page_count = 1
        self.percent = 0.0

    def reset(self) -> None:
        self.file_index, self.total_files = 0, 1
        self.page_index, self.page_count = 1, 1
        self.percent = 0.0

    def begin_file(self, index: int, total: int) -> None:
        """index is the 0-based queue position."""
        self.file_index = max(0, int(index))
        self.total_files = max(1, int(total))
        self.page_index, self.page_count = 1, 1

    def begin_page(self, page_index: int, page_count: int) -> None:
        """page_index is 1-based."""
        self.page_count = max(1, int(page_count))
        self.page_index = min(max(1, int(page_index)), self.page_count)

    def update(self, event: ProgressEvent) -> Optional[float]:
        """Returns the new percentage, or None when the event does not move the indicator."""
        if event.status != RECOGNIZING_STATUS:
            return None
        fraction = max(0.0, min(1.0, float(event.progress)))

        if self.mode == "per_call":
            pct = fraction * 100.0
        else:
            within_file = (self.page_index - 1 + fraction) / self.page_count
            pct = (self.file_index + within_file) / self.total_files * 100.0

        self.percent = max(0.0, min(100.0, pct))
        return self.percent
