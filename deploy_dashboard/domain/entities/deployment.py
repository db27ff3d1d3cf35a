import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

logger = logging.getLogger(__name__)


class DeployStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    RUNNING = "running"
    CANCELED = "canceled"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_deployed_at(raw: Union[str, int, float, datetime, None]) -> Optional[datetime]:
    """Parse a timestamp from an ISO-8601 string or a number of epoch milliseconds.

    Strings are read as ISO-8601 only, so ``"20261018"`` is a basic-format date.
    Returns None when the value is absent or cannot be parsed, including instants
    outside the representable UTC range. Naive values are taken as UTC.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, (int, float)):
        try:
            parsed = datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(raw).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def resolve_deployed_at(raw: Union[str, int, float, datetime, None], now: Optional[datetime] = None) -> datetime:
    """Resolve a deployment instant, substituting the current time for missing or invalid input."""
    parsed = parse_deployed_at(raw)
    if parsed is not None:
        return parsed
    return now or utcnow()


def format_deployed_at(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeployRecord(BaseModel):
    """One reported deployment event. Immutable once created."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=False)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    project_name: str = Field(alias="projectName")
    operator: str
    environment: str
    branch: str
    commit: str
    note: Optional[str] = None
    deployed_at: datetime = Field(default_factory=utcnow, alias="deployedAt")
    status: DeployStatus

    @field_validator("deployed_at", mode="before")
    @classmethod
    def _parse_deployed_at(cls, value: Any) -> datetime:
        parsed = parse_deployed_at(value)
        if parsed is None:
            raise ValueError(f"invalid deployedAt: {value!r}")
        return parsed

    @field_serializer("deployed_at")
    def _serialize_deployed_at(self, value: datetime) -> str:
        return format_deployed_at(value)

    @property
    def score(self) -> int:
        """Time index score: deployment instant in epoch milliseconds."""
        return int(self.deployed_at.timestamp() * 1000)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeployRecord":
        return cls.model_validate(data)


def parse_record(raw: Union[str, bytes, Dict[str, Any], None]) -> Optional[DeployRecord]:
    """Decode a stored record blob; corrupt or incomplete blobs read as absent."""
    if raw is None:
        return None
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        if not isinstance(data, dict):
            return None
        return DeployRecord.from_dict(data)
    except (ValueError, ValidationError) as e:
        logger.debug(f"Dropping unreadable deploy record: {e}")
        return None
