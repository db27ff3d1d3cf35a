"""Record store interface shared by the remote, file and memory backends."""
from abc import ABC, abstractmethod
from typing import Iterable, List, Set

from deploy_dashboard.domain.entities.deployment import DeployRecord

# Upper bound on records kept by the local tiers and the legacy list
MAX_ITEMS = 200


class RecordStore(ABC):
    """Base class for deploy record backends."""

    name: str = "store"

    @abstractmethod
    async def put(self, record: DeployRecord) -> None:
        """Persist a record, index it by time and register its project."""

    @abstractmethod
    async def list(self, max_count: int = MAX_ITEMS) -> List[DeployRecord]:
        """Return up to ``max_count`` records, newest first."""

    @abstractmethod
    async def projects(self) -> Set[str]:
        """Return every known project name."""

    @abstractmethod
    async def clear(self) -> int:
        """Remove all records and projects, returning a best-effort count."""

    async def close(self) -> None:
        """Release any held resources."""


def newest_first(records: Iterable[DeployRecord]) -> List[DeployRecord]:
    """Sort records by deployment time descending, keeping input order for ties."""
    return sorted(records, key=lambda record: record.deployed_at, reverse=True)


def dedupe(records: Iterable[DeployRecord]) -> List[DeployRecord]:
    """Drop repeated identifiers, keeping the first occurrence."""
    seen = set()
    unique = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique
