"""Content-filter audit log.

Bounded, in-memory record of filtered submissions, kept for 24 hours and
capped at the most recent entries.
"""

import logging
import threading
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from media_director.augmentation.schemas import (
    ContentFilterEntry,
    ContentFilterStats,
    FilteredTerm,
    TermCount,
)

logger = logging.getLogger(__name__)

MAX_ENTRIES = 1000
RETENTION = timedelta(hours=24)
TOP_TERMS = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentFilterLog:
    def __init__(
        self,
        max_entries: int = MAX_ENTRIES,
        retention: timedelta = RETENTION,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.max_entries = max_entries
        self.retention = retention
        self._clock = clock or _utcnow
        self._entries: list[ContentFilterEntry] = []
        self._lock = threading.Lock()

    def _prune(self) -> None:
        cutoff = self._clock() - self.retention
        kept = [entry for entry in self._entries if entry.timestamp > cutoff]
        kept = kept[-self.max_entries:]
        if len(kept) != len(self._entries):
            logger.debug(f"Pruned {len(self._entries) - len(kept)} content-filter log entries")
        self._entries = kept

    def record(
        self,
        original_prompt: str,
        filtered_prompt: str,
        filtered_terms: list[FilteredTerm],
        model_id: str,
        success: bool = True,
        generation_id: Optional[str] = None,
    ) -> ContentFilterEntry:
        entry = ContentFilterEntry(
            timestamp=self._clock(),
            original_prompt=original_prompt,
            filtered_prompt=filtered_prompt,
            filtered_terms=filtered_terms,
            model_id=model_id,
            success=success,
            generation_id=generation_id or f"gen_{uuid.uuid4().hex[:12]}",
        )
        with self._lock:
            self._entries.append(entry)
            self._prune()
        if filtered_terms:
            logger.info(
                f"Audited {len(filtered_terms)} filtered term(s) for {model_id} "
                f"(generation {entry.generation_id})"
            )
        return entry

    def mark_result(self, generation_id: str, success: bool) -> bool:
        """Update the outcome of an audited generation once the provider answers."""
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.generation_id == generation_id:
                    self._entries[index] = entry.model_copy(update={"success": success})
                    return True
        return False

    def entries(self) -> list[ContentFilterEntry]:
        with self._lock:
            self._prune()
            return list(self._entries)

    def stats(self) -> ContentFilterStats:
        entries = self.entries()
        total = len(entries)
        successful = sum(1 for entry in entries if entry.success)
        counts = Counter(term.original.lower() for entry in entries for term in entry.filtered_terms)
        return ContentFilterStats(
            total_generations=total,
            successful_generations=successful,
            failed_generations=total - successful,
            success_rate=(successful / total) * 100 if total else 0.0,
            most_filtered_terms=[
                TermCount(term=term, count=count) for term, count in counts.most_common(TOP_TERMS)
            ],
        )

    def clear(self) -> None:
        with self._lock:
            self._entries = []
