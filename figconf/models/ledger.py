"""Version ledger entry model.

One entry per ``set version``; entries are immutable once appended and the
last entry in file order is the active version.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class VersionLogEntry(BaseModel):
    """A single line of ``versions.jsonl``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    manifest_checksum: str = Field(alias="manifestChecksum")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_json_line(self) -> str:
        return self.model_dump_json(by_alias=True) + "\n"
