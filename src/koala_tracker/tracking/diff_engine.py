"""Diff computation between two directory snapshots."""

from koala_tracker.models import ChangeSet, Snapshot


def _except_content(left: Snapshot, right: Snapshot) -> set[str]:
    """Keys of ``left`` that are missing from ``right`` or not content-equal there."""
    result = set()
    for key, record in left.records.items():
        other = right.get(key)
        if other is None or not record.content_equals(other):
            result.add(key)
    return result


def compute_diff(previous: Snapshot, current: Snapshot) -> ChangeSet:
    """
    Classify the differences between a previous and a current snapshot.

    Args:
        previous: Last known state (usually a copy of the master state)
        current: Freshly scanned state

    Returns:
        ChangeSet whose added, removed and updated lists are disjoint and
        cover every key that changed. A key that differs on both sides is
        always reported as updated, never as a remove and add pair.
    """
    only_in_previous = _except_content(previous, current)
    only_in_current = _except_content(current, previous)

    updated = only_in_previous & only_in_current
    removed = only_in_previous - updated
    added = only_in_current - updated

    return ChangeSet(
        added=[current.records[key] for key in sorted(added)],
        removed=[previous.records[key] for key in sorted(removed)],
        updated=[current.records[key] for key in sorted(updated)],
    )
