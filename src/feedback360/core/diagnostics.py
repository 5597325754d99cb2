from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set, Tuple

logger = logging.getLogger(__name__)


@dataclass
class Diagnostics:
    """
    Per-batch record of input the engine could not use.

    Nothing here changes the aggregates; it exists so a UI or CLI can show
    which answers fell through the normalizer and which columns were ignored.
    A cell seen by several aggregators is counted once.
    """
    unrecognized_values: Counter = field(default_factory=Counter)
    skipped_headers: Set[str] = field(default_factory=set)
    rows_processed: int = 0
    _seen_cells: Set[Tuple[int, str]] = field(default_factory=set, repr=False)

    def record_unrecognized(self, row_index: int, header: str, text: str) -> None:
        cell = (row_index, header)
        if cell in self._seen_cells:
            return
        self._seen_cells.add(cell)
        self.unrecognized_values[text.strip()] += 1
        logger.debug("Unrecognized answer in row %s, column %r: %r", row_index, header, text)

    def record_skipped_header(self, header: str) -> None:
        if header not in self.skipped_headers:
            self.skipped_headers.add(header)
            logger.debug("Skipping non-evaluation column %r", header)

    def top_unrecognized(self, limit: int = 10) -> List[Tuple[str, int]]:
        return self.unrecognized_values.most_common(limit)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowsProcessed": self.rows_processed,
            "unrecognizedValues": dict(self.unrecognized_values),
            "skippedHeaders": sorted(self.skipped_headers),
        }
