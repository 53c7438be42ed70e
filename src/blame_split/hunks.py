"""Group consecutive blame records into hunks.

A hunk is a maximal run of records sharing (commit, author, summary).
Hunks are derived data: recompute them whenever the records change.
"""

from __future__ import annotations

from dataclasses import dataclass

from blame_split.porcelain import AttributionRecord, is_uncommitted


@dataclass(frozen=True)
class Hunk:
    commit: str
    author: str
    author_time: int
    summary: str
    line_count: int
    start_line: int  # 1-based display line of the hunk's first record

    @property
    def end_line(self) -> int:
        return self.start_line + self.line_count - 1

    @property
    def is_uncommitted(self) -> bool:
        return is_uncommitted(self.commit)


def _key(record: AttributionRecord) -> tuple[str, str, str]:
    return (record.commit, record.author, record.summary)


def aggregate(records: list[AttributionRecord]) -> list[Hunk]:
    """Collapse records into hunks, preserving order."""
    hunks: list[Hunk] = []
    run_start = 0
    for index in range(1, len(records) + 1):
        if index < len(records) and _key(records[index]) == _key(records[run_start]):
            continue
        first = records[run_start]
        hunks.append(
            Hunk(
                commit=first.commit,
                author=first.author,
                author_time=first.author_time,
                summary=first.summary,
                line_count=index - run_start,
                start_line=run_start + 1,
            )
        )
        run_start = index
    return hunks


def expand(hunks: list[Hunk]) -> list[AttributionRecord]:
    """One synthetic record per hunk line (inverse of aggregate on the grouping key)."""
    records: list[AttributionRecord] = []
    for hunk in hunks:
        for offset in range(hunk.line_count):
            line = hunk.start_line + offset
            records.append(
                AttributionRecord(
                    commit=hunk.commit,
                    orig_line=line,
                    final_line=line,
                    content="",
                    author=hunk.author,
                    author_time=hunk.author_time,
                    summary=hunk.summary,
                )
            )
    return records

