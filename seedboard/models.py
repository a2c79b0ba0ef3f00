"""Leaderboard records and their cache-table row shapes."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NFTType(str, Enum):
    MYTHIC = "Mythic"
    ANCIENT = "Ancient"


class RefreshState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ERROR = "error"


@dataclass
class NFTItem:
    identifier: str
    image_url: Optional[str] = None
    opensea_url: Optional[str] = None

    @classmethod
    def from_api(cls, nft: dict) -> "NFTItem":
        identifier = nft.get("identifier")
        return cls(
            identifier=str(identifier) if identifier is not None else "",
            image_url=nft.get("image_url"),
            opensea_url=nft.get("opensea_url"),
        )


@dataclass
class LeaderboardEntry:
    collection_slug: str
    nft_type: NFTType
    token_id: str
    points: int = 0
    image_url: Optional[str] = None
    opensea_url: Optional[str] = None
    is_listed: bool = False

    def to_row(self) -> dict:
        """Column dict for the leaderboard_entries table."""
        return {
            "collection_slug": self.collection_slug,
            "nft_type": NFTType(self.nft_type).value,
            "token_id": self.token_id,
            "points": self.points,
            "image_url": self.image_url,
            "opensea_url": self.opensea_url,
            "is_listed": self.is_listed,
        }

    @classmethod
    def from_row(cls, row: dict) -> "LeaderboardEntry":
        return cls(
            collection_slug=row.get("collection_slug", ""),
            nft_type=NFTType(row.get("nft_type", "Mythic")),
            token_id=str(row.get("token_id", "")),
            points=int(row.get("points") or 0),
            image_url=row.get("image_url"),
            opensea_url=row.get("opensea_url"),
            is_listed=bool(row.get("is_listed")),
        )


@dataclass
class RefreshStatus:
    status: RefreshState = RefreshState.IDLE
    last_started_at: Optional[str] = None
    last_completed_at: Optional[str] = None
    last_error: Optional[str] = None

    @classmethod
    def from_row(cls, row: Optional[dict]) -> "RefreshStatus":
        if not row:
            return cls()
        return cls(
            status=RefreshState(row.get("status") or "idle"),
            last_started_at=row.get("last_started_at"),
            last_completed_at=row.get("last_completed_at"),
            last_error=row.get("last_error"),
        )

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "lastStartedAt": self.last_started_at,
            "lastCompletedAt": self.last_completed_at,
            "lastError": self.last_error,
        }
