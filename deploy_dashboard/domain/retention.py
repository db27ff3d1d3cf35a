from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from deploy_dashboard.domain.entities.deployment import DeployRecord, utcnow

RETENTION_DAYS = 30


class RetentionPolicy:
    """Sliding window that hides records older than the retention horizon."""

    def __init__(self, window: timedelta = timedelta(days=RETENTION_DAYS), clock: Callable[[], datetime] = utcnow):
        self.window = window
        self.clock = clock

    def now(self) -> datetime:
        return self.clock()

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        return (now or self.clock()) - self.window

    def cutoff_ms(self, now: Optional[datetime] = None) -> int:
        return int(self.cutoff(now).timestamp() * 1000)

    def is_retained(self, record: DeployRecord, now: Optional[datetime] = None) -> bool:
        return record.deployed_at >= self.cutoff(now)

    def apply(self, records: Iterable[DeployRecord], now: Optional[datetime] = None) -> List[DeployRecord]:
        cutoff = self.cutoff(now)
        return [record for record in records if record.deployed_at >= cutoff]
