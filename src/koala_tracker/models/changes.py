"""
Change classification models.

A ChangeSet is the result of comparing two snapshots; FileChangeEvents are
what the state store emits after applying one.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from koala_tracker.models.file_record import FileRecord


class ChangeType(str, Enum):
    """Kinds of events emitted by the state store."""

    FOUND = "found"  # present at the initial scan
    ADDED = "added"
    ALTERED = "altered"
    REMOVED = "removed"


class ChangeSet(BaseModel):
    """
    Classified differences between a previous and a current snapshot.

    The three lists are disjoint by key. Removed entries carry the previous
    record; added and updated entries carry the current record.
    """

    added: list[FileRecord] = Field(default_factory=list, description="Records only in the current snapshot")
    removed: list[FileRecord] = Field(default_factory=list, description="Records only in the previous snapshot")
    updated: list[FileRecord] = Field(default_factory=list, description="Records present in both but not content-equal")

    @computed_field
    @property
    def total_changes(self) -> int:
        return len(self.added) + len(self.removed) + len(self.updated)

    @property
    def is_empty(self) -> bool:
        return self.total_changes == 0

    def __str__(self) -> str:
        return f"ChangeSet(+{len(self.added)} -{len(self.removed)} ~{len(self.updated)})"


class FileChangeEvent(BaseModel):
    """Represents one observed change to the master state."""

    change_type: ChangeType
    name: str = Field(..., min_length=1, description="Case-preserving file name")
    record: FileRecord | None = Field(None, description="Record the event refers to")
    line_delta: int | None = Field(None, description="New minus previous line count, for altered files")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return f"FileChangeEvent({self.change_type.value}: {self.name})"

    model_config = ConfigDict(frozen=True)
