"""Shared builders for porcelain output and fake git backends."""

from blame_split.io.git_cli import QueryResult

SHA_A = "deadbeef" + "a" * 32
SHA_B = "cafef00d" + "b" * 32
SHA_C = "0badc0de" + "c" * 32
UNCOMMITTED = "0" * 40

DEFAULT_TIME = 1714521600  # 2024-05-01 00:00:00 UTC


def make_porcelain(entries, *, filename="file.py", times=None):
    """Build `git blame --porcelain` lines.

    Args:
        entries: Sequence of (commit, author, summary, content) per source line.
        filename: Value for each commit's `filename` line.
        times: Optional {commit: author_time}; DEFAULT_TIME otherwise.

    Metadata is emitted only the first time a commit appears, like git does.

    Returns:
        List of porcelain lines without newlines.
    """
    times = times or {}
    seen = set()
    lines = []
    for number, (commit, author, summary, content) in enumerate(entries, start=1):
        lines.append(f"{commit} {number} {number} 1")
        if commit not in seen:
            seen.add(commit)
            author_time = times.get(commit, DEFAULT_TIME)
            lines.extend(
                [
                    f"author {author}",
                    f"author-mail <{author.lower().replace(' ', '.')}@example.com>",
                    f"author-time {author_time}",
                    "author-tz +0000",
                    f"committer {author}",
                    f"committer-mail <{author.lower().replace(' ', '.')}@example.com>",
                    f"committer-time {author_time}",
                    "committer-tz +0000",
                    f"summary {summary}",
                    f"filename {filename}",
                ]
            )
        lines.append(f"\t{content}")
    return lines


def scenario_entries():
    """Five lines: three from SHA_A by Alice, two from SHA_B by Bob."""
    return [
        (SHA_A, "Alice", "fix", "line one"),
        (SHA_A, "Alice", "fix", "line two"),
        (SHA_A, "Alice", "fix", "line three"),
        (SHA_B, "Bob", "add", "line four"),
        (SHA_B, "Bob", "add", "line five"),
    ]


def ok(lines):
    return QueryResult(lines=list(lines), returncode=0, stderr="")


def failed(stderr="fatal: bad revision"):
    return QueryResult(lines=[], returncode=128, stderr=stderr)


class FakeGitBackend:
    """In-memory GitBackend: register blame/file/commit output per revision.

    Unregistered revisions answer like git does for a bad revision.
    `calls` records every query as a tuple for assertions.
    """

    def __init__(self, cwd="/repo"):
        self.cwd = cwd
        self.blames = {}
        self.files = {}
        self.commits = {}
        self.contents_blame = None
        self.calls = []

    def add_revision(self, revision, entries, *, content=None, filename="file.py"):
        """Register blame output (and file content) for revision (None: working tree)."""
        self.blames[revision] = ok(make_porcelain(entries, filename=filename))
        if revision is not None:
            lines = content if content is not None else [entry[3] for entry in entries]
            self.files[revision] = ok(lines)
        return self

    def blame(self, path, revision=None):
        self.calls.append(("blame", path, revision))
        return self.blames.get(revision, failed(f"fatal: no such ref: {revision}"))

    def blame_contents(self, path, lines):
        self.calls.append(("blame_contents", path, tuple(lines)))
        if self.contents_blame is not None:
            return self.contents_blame
        return self.blames.get(None, failed())

    def show_file(self, path, revision):
        self.calls.append(("show_file", path, revision))
        return self.files.get(revision, failed(f"fatal: invalid object name '{revision}'"))

    def show_commit(self, revision):
        self.calls.append(("show_commit", revision))
        return self.commits.get(revision, failed(f"fatal: bad object {revision}"))

    def toplevel(self):
        return self.cwd
