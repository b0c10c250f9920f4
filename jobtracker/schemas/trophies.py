from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from jobtracker.trophies.catalog import TrophyCategory, TrophyDefinition, TrophyTier
from jobtracker.trophies.engine import ReconciliationResult, TrophyProgress
from jobtracker.trophies.notifications import TrophyNotification


class TrophyUnlockIn(BaseModel):
    trophy_id: Optional[str] = None
    trophy_name: Optional[str] = None
    trophy_type: Optional[str] = None
    model_config = ConfigDict(extra="ignore")


class UnlockedTrophyOut(BaseModel):
    trophy_id: str
    trophy_name: str
    trophy_type: str
    unlocked_date: date
    unlocked_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TrophyDefinitionOut(BaseModel):
    id: str
    name: str
    description: str
    type: TrophyTier
    category: TrophyCategory
    requirement: int
    rarity: int

    @classmethod
    def from_definition(cls, trophy: TrophyDefinition) -> "TrophyDefinitionOut":
        return cls(
            id=trophy.id,
            name=trophy.name,
            description=trophy.description,
            type=trophy.tier,
            category=trophy.category,
            requirement=trophy.requirement,
            rarity=trophy.rarity,
        )


class TrophyProgressOut(TrophyDefinitionOut):
    progress: int
    unlocked: bool
    unlockedDate: Optional[date] = None

    @classmethod
    def from_progress(cls, item: TrophyProgress) -> "TrophyProgressOut":
        base = TrophyDefinitionOut.from_definition(item.trophy).model_dump()
        return cls(
            **base,
            progress=item.progress,
            unlocked=item.unlocked,
            unlockedDate=item.unlocked_date,
        )


class NotificationOut(BaseModel):
    id: str
    trophy: TrophyDefinitionOut
    show_at: datetime
    expires_at: datetime

    @classmethod
    def from_notification(cls, note: TrophyNotification) -> "NotificationOut":
        return cls(
            id=note.id,
            trophy=TrophyDefinitionOut.from_definition(note.trophy),
            show_at=note.show_at,
            expires_at=note.expires_at,
        )


class ReconciliationOut(BaseModel):
    loaded: bool
    stats: dict[str, int]
    trophies: list[TrophyProgressOut]
    newly_unlocked: list[str]
    revoked: list[str]
    notifications: list[NotificationOut]

    @classmethod
    def from_result(cls, result: ReconciliationResult) -> "ReconciliationOut":
        return cls(
            loaded=result.loaded,
            stats=result.stats.as_dict(),
            trophies=[TrophyProgressOut.from_progress(t) for t in result.trophies],
            newly_unlocked=[t.id for t in result.newly_unlocked],
            revoked=list(result.revoked),
            notifications=[NotificationOut.from_notification(n) for n in result.notifications],
        )


class TrophySummaryOut(BaseModel):
    total: int
    unlocked: int
    bronze: int
    silver: int
    gold: int
    platinum: int
