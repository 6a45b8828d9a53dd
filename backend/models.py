from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Punch:
    id: int
    owner: int
    timestamp: datetime
