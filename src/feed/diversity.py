"""Diversity enforcement over an ordered feed.

Best-effort local reordering that bounds runs of the same source and the
same category. Swaps are first-match-wins with no backtracking, so the
result is not globally optimal; when no candidate exists the run is kept.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from src.config.schemas.feed import DiversityConfig
from src.feed.models import ScoredItem


logger = structlog.get_logger()


@dataclass
class DiversityResult:
    """Outcome of diversity enforcement.

    Attributes:
        entries: Reordered entries.
        source_swaps: Swaps performed by the source cap.
        category_swaps: Swaps performed by the category cap.
        unresolved_runs: Runs accepted because no candidate existed.
    """

    entries: list[ScoredItem] = field(default_factory=list)
    source_swaps: int = 0
    category_swaps: int = 0
    unresolved_runs: int = 0

    @property
    def total_swaps(self) -> int:
        """Swaps performed by both passes."""
        return self.source_swaps + self.category_swaps


def _source_of(entry: ScoredItem) -> str | None:
    return entry.item.source or None


def _category_of(entry: ScoredItem) -> str | None:
    return entry.item.category


def _find_different(
    entries: list[ScoredItem],
    start: int,
    value: str,
    key: Callable[[ScoredItem], str | None],
) -> int | None:
    """Index of the first entry at or after ``start`` whose key differs."""
    for j in range(start, len(entries)):
        if key(entries[j]) != value:
            return j
    return None


class DiversityEnforcer:
    """Applies the source cap and then the category cap."""

    def __init__(self, config: DiversityConfig | None = None) -> None:
        """Initialize the enforcer.

        Args:
            config: Diversity configuration.
        """
        self._config = config or DiversityConfig()
        self._log = logger.bind(component="feed", subcomponent="diversity")

    def enforce(self, entries: list[ScoredItem]) -> DiversityResult:
        """Run both passes.

        Args:
            entries: Ordered entries.

        Returns:
            DiversityResult with the reordered entries and swap counts.
        """
        result = DiversityResult(entries=list(entries))
        result.source_swaps, unresolved_sources = self.enforce_source_cap(
            result.entries
        )
        result.category_swaps, unresolved_categories = self.enforce_category_cap(
            result.entries
        )
        result.unresolved_runs = unresolved_sources + unresolved_categories

        self._log.debug(
            "diversity_complete",
            entries=len(result.entries),
            source_swaps=result.source_swaps,
            category_swaps=result.category_swaps,
            unresolved_runs=result.unresolved_runs,
        )
        return result

    def enforce_source_cap(self, entries: list[ScoredItem]) -> tuple[int, int]:
        """Bound same-source runs in place.

        When more than ``max_source_run`` consecutive entries share a source,
        the first later entry with a different source is swapped into the
        position right after the allowed run, and scanning resumes at the
        swapped-in entry.

        Args:
            entries: Ordered entries, modified in place.

        Returns:
            Tuple of (swaps performed, runs accepted without a candidate).
        """
        max_run = self._config.max_source_run
        swaps = 0
        unresolved = 0
        i = 0
        while i + max_run < len(entries):
            source = _source_of(entries[i])
            run = entries[i : i + max_run + 1]
            if source is None or any(_source_of(e) != source for e in run):
                i += 1
                continue

            target = i + max_run
            j = _find_different(entries, target + 1, source, _source_of)
            if j is None:
                self._log.debug("source_run_accepted", source=source, position=target)
                unresolved += 1
                i += 1
                continue

            entries[target], entries[j] = entries[j], entries[target]
            swaps += 1
            i = target
        return swaps, unresolved

    def enforce_category_cap(self, entries: list[ScoredItem]) -> tuple[int, int]:
        """Bound same-category runs in place.

        An entry whose ``category_window`` finalized predecessors all share
        its category is swapped with the first later entry of a different
        category. Entries without a category never form a run.

        Args:
            entries: Ordered entries, modified in place.

        Returns:
            Tuple of (swaps performed, runs accepted without a candidate).
        """
        window = self._config.category_window
        swaps = 0
        unresolved = 0
        for pos in range(window, len(entries)):
            category = _category_of(entries[pos])
            if category is None:
                continue
            if any(_category_of(e) != category for e in entries[pos - window : pos]):
                continue

            j = _find_different(entries, pos + 1, category, _category_of)
            if j is None:
                self._log.debug(
                    "category_run_accepted", category=category, position=pos
                )
                unresolved += 1
                continue

            entries[pos], entries[j] = entries[j], entries[pos]
            swaps += 1
        return swaps, unresolved


def enforce_source_cap(
    entries: list[ScoredItem], config: DiversityConfig | None = None
) -> list[ScoredItem]:
    """Return a copy of ``entries`` with bounded same-source runs."""
    result = list(entries)
    DiversityEnforcer(config).enforce_source_cap(result)
    return result


def enforce_category_cap(
    entries: list[ScoredItem], config: DiversityConfig | None = None
) -> list[ScoredItem]:
    """Return a copy of ``entries`` with bounded same-category runs."""
    result = list(entries)
    DiversityEnforcer(config).enforce_category_cap(result)
    return result


def enforce_diversity(
    entries: list[ScoredItem], config: DiversityConfig | None = None
) -> DiversityResult:
    """Pure function API for diversity enforcement.

    Args:
        entries: Ordered entries.
        config: Diversity configuration.

    Returns:
        DiversityResult with the reordered entries and swap counts.
    """
    return DiversityEnforcer(config).enforce(entries)
