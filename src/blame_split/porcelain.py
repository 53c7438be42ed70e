"""Streaming parser for ``git blame --porcelain`` output.

The porcelain format repeats a ``<sha> <orig> <final> [<count>]`` header for
every source line but prints the commit's metadata block only the first time
that commit appears. Metadata is therefore cached per commit and reused for
every later header of the same commit.

// [LAW:one-source-of-truth] CommitInfo cache is the only metadata source for records.
// [LAW:dataflow-not-control-flow] The cache is passed in and returned, never held globally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum

UNCOMMITTED_SHA = "0" * 40

_HEADER_RE = re.compile(r"^([0-9a-f]{4,64}) (\d+) (\d+)(?: (\d+))?$")


def is_uncommitted(commit: str | None) -> bool:
    """True for the all-zero id git uses for working-copy lines."""
    return bool(commit) and set(commit) == {"0"}


def normalize_revision(commit: str | None) -> str | None:
    """Map the uncommitted id (and empty ids) to None."""
    if not commit or is_uncommitted(commit):
        return None
    return commit


@dataclass(frozen=True)
class CommitInfo:
    """Per-commit metadata from the porcelain header block."""

    author: str = ""
    author_mail: str = ""
    author_time: int = 0
    author_tz: str = ""
    committer: str = ""
    committer_mail: str = ""
    committer_time: int = 0
    committer_tz: str = ""
    summary: str = ""
    previous: str | None = None
    previous_filename: str | None = None
    filename: str = ""
    boundary: bool = False


@dataclass(frozen=True)
class AttributionRecord:
    """One blamed source line."""

    commit: str
    orig_line: int
    final_line: int
    content: str
    author: str = ""
    author_mail: str = ""
    author_time: int = 0
    author_tz: str = ""
    committer: str = ""
    committer_mail: str = ""
    committer_time: int = 0
    committer_tz: str = ""
    summary: str = ""
    previous: str | None = None
    previous_filename: str | None = None
    filename: str = ""
    boundary: bool = False

    @property
    def revision(self) -> str | None:
        """Commit id with the uncommitted sentinel normalized to None."""
        return normalize_revision(self.commit)

    @property
    def is_uncommitted(self) -> bool:
        return is_uncommitted(self.commit)


CommitCache = dict[str, CommitInfo]


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def _apply_metadata(info: CommitInfo, line: str) -> CommitInfo:
    """Fold one ``key value`` metadata line into info. Unknown keys are ignored."""
    key, _, value = line.partition(" ")
    if key == "author":
        return replace(info, author=value)
    if key == "author-mail":
        return replace(info, author_mail=value)
    if key == "author-time":
        return replace(info, author_time=_to_int(value))
    if key == "author-tz":
        return replace(info, author_tz=value)
    if key == "committer":
        return replace(info, committer=value)
    if key == "committer-mail":
        return replace(info, committer_mail=value)
    if key == "committer-time":
        return replace(info, committer_time=_to_int(value))
    if key == "committer-tz":
        return replace(info, committer_tz=value)
    if key == "summary":
        return replace(info, summary=value)
    if key == "previous":
        sha, _, path = value.partition(" ")
        return replace(info, previous=sha or None, previous_filename=path or None)
    if key == "filename":
        return replace(info, filename=value)
    if key == "boundary":
        return replace(info, boundary=True)
    return info


def _make_record(
    commit: str, orig_line: int, final_line: int, content: str, info: CommitInfo
) -> AttributionRecord:
    return AttributionRecord(
        commit=commit,
        orig_line=orig_line,
        final_line=final_line,
        content=content,
        author=info.author,
        author_mail=info.author_mail,
        author_time=info.author_time,
        author_tz=info.author_tz,
        committer=info.committer,
        committer_mail=info.committer_mail,
        committer_time=info.committer_time,
        committer_tz=info.committer_tz,
        summary=info.summary,
        previous=info.previous,
        previous_filename=info.previous_filename,
        filename=info.filename,
        boundary=info.boundary,
    )


def parse(
    raw_lines: list[str], cache: CommitCache | None = None
) -> tuple[list[AttributionRecord], CommitCache]:
    """Parse porcelain lines into records.

    Args:
        raw_lines: Lines of ``git blame --porcelain`` output, without newlines.
        cache: Commit metadata already known from a previous pass. Not mutated.

    Returns:
        (records, cache) where cache includes every commit described in the input.

    Never raises on malformed input: noise before the first header is skipped and
    a trailing header without a tab-prefixed content line produces no record.
    """
    commits: CommitCache = dict(cache or {})
    records: list[AttributionRecord] = []
    total = len(raw_lines)
    i = 0

    while i < total:
        match = _HEADER_RE.match(raw_lines[i])
        if match is None:
            i += 1
            continue

        commit = match.group(1)
        orig_line = int(match.group(2))
        final_line = int(match.group(3))
        i += 1

        # Metadata block: everything up to the content line or the next header.
        info = commits.get(commit, CommitInfo())
        while i < total and not raw_lines[i].startswith("\t"):
            if _HEADER_RE.match(raw_lines[i]):
                break
            info = _apply_metadata(info, raw_lines[i])
            i += 1
        commits[commit] = info

        if i >= total or not raw_lines[i].startswith("\t"):
            # Header without content: truncated input or a stray header.
            continue

        records.append(_make_record(commit, orig_line, final_line, raw_lines[i][1:], info))
        i += 1

    return records, commits


def parse_porcelain_text(text: str, cache: CommitCache | None = None):
    """Convenience wrapper splitting raw porcelain text on newlines."""
    return parse(text.split("\n"), cache)


# ─── Query outcomes ─────────────────────────────────────────────────────────


class BlameStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class BlameOutcome:
    """Result of one blame query + parse.

    // [LAW:dataflow-not-control-flow] Failure vs empty is a value, not an exception.
    """

    status: BlameStatus
    records: tuple[AttributionRecord, ...] = ()
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is BlameStatus.OK


def outcome_from_query(result, *, what: str = "Git blame") -> BlameOutcome:
    """Turn a QueryResult into a BlameOutcome."""
    if result.returncode != 0:
        message = f"{what} failed"
        stderr = (result.stderr or "").strip()
        if stderr:
            message += ":\n" + stderr
        return BlameOutcome(BlameStatus.FAILED, message=message)

    records, _ = parse(result.lines)
    if not records:
        return BlameOutcome(BlameStatus.EMPTY, message="No blame information (new or untracked file?)")
    return BlameOutcome(BlameStatus.OK, records=tuple(records))


def load_blame(backend, path: str, revision: str | None = None, content: list[str] | None = None) -> BlameOutcome:
    """Run the right blame query for (revision, content) and parse it.

    content, when given, blames unsaved text instead of a committed revision.
    """
    if content is not None:
        return outcome_from_query(
            backend.blame_contents(path, content),
            what="Git blame with buffer contents",
        )
    return outcome_from_query(backend.blame(path, revision))
