"""
Data models for observed files and directory snapshots.

A FileRecord describes one file at one point in time; a Snapshot maps the
case-insensitive key of every matched file to its record.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from koala_tracker.models.exceptions import KeyCollisionError

logger = logging.getLogger(__name__)


def make_key(name: str) -> str:
    """Return the case-insensitive identity used for every lookup of a file name."""
    return name.upper()


class KeyCollisionPolicy(str, Enum):
    """How to resolve two files whose names differ only by case."""

    LAST_WINS = "last_wins"  # ordinal-last name keeps the key
    REJECT = "reject"  # fail the scan


class FileRecord(BaseModel):
    """
    Represents one observed file.

    Identity is the upper-cased name; change detection uses content
    equality (name, modification time and line count), not identity.
    """

    name: str = Field(..., min_length=1, description="Case-preserving file name for display")
    modified_at: datetime = Field(..., description="Last modification timestamp in UTC")
    line_count: int = Field(..., ge=0, description="Estimated number of lines")

    @computed_field
    @property
    def key(self) -> str:
        """Case-insensitive identity of the file."""
        return make_key(self.name)

    @field_validator('modified_at')
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        """Store timestamps as aware UTC values; naive values are taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    def content_equals(self, other: "FileRecord") -> bool:
        """Check whether two records describe the same file in the same state."""
        return (
            self.key == other.key
            and self.modified_at == other.modified_at
            and self.line_count == other.line_count
        )

    def __str__(self) -> str:
        return f"FileRecord({self.name}, {self.line_count} lines, {self.modified_at.isoformat()})"

    model_config = ConfigDict(frozen=True)


class Snapshot(BaseModel):
    """
    Full state of a directory at one point in time.

    Keys are unique and always equal to the upper-cased name of their record.
    """

    records: dict[str, FileRecord] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_keys(self):
        """Ensure every key matches the key of the record stored under it."""
        for key, record in self.records.items():
            if key != record.key:
                raise ValueError(f"snapshot key '{key}' does not match record key '{record.key}'")
        return self

    @classmethod
    def from_records(
        cls,
        records: Iterable[FileRecord],
        collision_policy: KeyCollisionPolicy = KeyCollisionPolicy.LAST_WINS,
    ) -> "Snapshot":
        """
        Build a snapshot from records in any order.

        Records are ordered by name (ordinal) before insertion, so the
        outcome of a case-insensitive collision does not depend on the order
        in which files were probed.

        Raises:
            KeyCollisionError: If two names share a key and the policy is REJECT
        """
        result: dict[str, FileRecord] = {}
        for record in sorted(records, key=lambda r: r.name):
            existing = result.get(record.key)
            if existing is not None:
                if collision_policy == KeyCollisionPolicy.REJECT:
                    raise KeyCollisionError(
                        f"Files '{existing.name}' and '{record.name}' differ only by case",
                        key=record.key,
                        names=[existing.name, record.name],
                    )
                logger.warning(
                    "Case-insensitive name collision on %s: keeping '%s', dropping '%s'",
                    record.key,
                    record.name,
                    existing.name,
                )
            result[record.key] = record
        return cls(records=result)

    def get(self, key: str) -> FileRecord | None:
        return self.records.get(key)

    def keys(self) -> set[str]:
        return set(self.records)

    def copy_records(self) -> dict[str, FileRecord]:
        """Return a shallow copy of the key to record mapping."""
        return dict(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, key: object) -> bool:
        return key in self.records

    def iter_records(self) -> Iterator[FileRecord]:
        """Iterate over records ordered by key."""
        for key in sorted(self.records):
            yield self.records[key]
