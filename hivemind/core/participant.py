"""
Participant records for HiveMind sessions.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional

COLOR_PALETTE = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4",
    "#FFEAA7", "#DDA0DD", "#98D8C8", "#F7DC6F",
]


def palette_color(index: int) -> str:
    """Pick a palette color, wrapping around after the last entry."""
    return COLOR_PALETTE[index % len(COLOR_PALETTE)]


@dataclass
class Participant:
    """One user's membership in a session. Identity is `id`."""
    id: str
    username: str
    color: str = ""
    is_host: bool = False
    joined_at: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    def touch(self, now: datetime) -> None:
        self.last_seen = now

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["joined_at"] = self.joined_at.isoformat() if self.joined_at else None
        data["last_seen"] = self.last_seen.isoformat() if self.last_seen else None
        return data
