"""Tests for hunk aggregation."""

from blame_split.hunks import aggregate, expand
from blame_split.porcelain import parse
from tests.harness import SHA_A, SHA_B, SHA_C, UNCOMMITTED, make_porcelain, scenario_entries


def _records(entries):
    records, _ = parse(make_porcelain(entries))
    return records


def test_scenario_groups_into_two_hunks():
    hunks = aggregate(_records(scenario_entries()))
    assert [(h.commit, h.line_count, h.start_line) for h in hunks] == [
        (SHA_A, 3, 1),
        (SHA_B, 2, 4),
    ]
    assert hunks[1].end_line == 5


def test_line_counts_sum_to_record_count():
    entries = [
        (SHA_A, "Alice", "fix", "1"),
        (SHA_B, "Bob", "add", "2"),
        (SHA_A, "Alice", "fix", "3"),
        (SHA_A, "Alice", "fix", "4"),
        (SHA_C, "Carol", "tweak", "5"),
    ]
    hunks = aggregate(_records(entries))
    assert sum(h.line_count for h in hunks) == 5
    # Same commit separated by another commit forms two hunks
    assert [h.commit for h in hunks] == [SHA_A, SHA_B, SHA_A, SHA_C]


def test_no_two_adjacent_hunks_share_a_key():
    entries = scenario_entries() + [(SHA_A, "Alice", "fix", "x"), (SHA_A, "Alice", "fix", "y")]
    hunks = aggregate(_records(entries))
    for left, right in zip(hunks, hunks[1:]):
        assert (left.commit, left.author, left.summary) != (right.commit, right.author, right.summary)


def test_empty_records():
    assert aggregate([]) == []


def test_uncommitted_hunk():
    hunks = aggregate(_records([(UNCOMMITTED, "Not Committed Yet", "wip", "a")]))
    assert hunks[0].is_uncommitted


def test_aggregate_is_idempotent_through_expand():
    hunks = aggregate(_records(scenario_entries()))
    assert aggregate(expand(hunks)) == hunks
