"""Static trophy definitions.

The catalog never changes at runtime; both the reconciliation engine and the
API read display metadata (name, description, rarity) from here.
"""
import enum
from dataclasses import dataclass
from typing import Iterator, Optional


class TrophyTier(str, enum.Enum):
    bronze = "bronze"
    silver = "silver"
    gold = "gold"
    platinum = "platinum"


class TrophyCategory(str, enum.Enum):
    applications = "applications"
    interviews = "interviews"
    offers = "offers"
    special = "special"


@dataclass(frozen=True)
class TrophyDefinition:
    id: str
    name: str
    description: str
    tier: TrophyTier
    category: TrophyCategory
    requirement: int
    rarity: int  # percent of users holding it, display only

    def __post_init__(self):
        if self.requirement <= 0:
            raise ValueError(f"trophy {self.id!r} needs a positive requirement")


# progress for this one comes from technical rounds, not all interviews
TECHNICAL_TROPHY_ID = "technical_ace"

_B, _S, _G, _P = TrophyTier.bronze, TrophyTier.silver, TrophyTier.gold, TrophyTier.platinum
_APPS = TrophyCategory.applications
_INTERVIEWS = TrophyCategory.interviews

TROPHIES: tuple[TrophyDefinition, ...] = (
    # Bronze
    TrophyDefinition("first_steps", "First Steps", "Submit your first job application", _B, _APPS, 1, 95),
    TrophyDefinition("getting_started", "Getting Started", "Apply to 10 jobs", _B, _APPS, 10, 85),
    TrophyDefinition("building_momentum", "Building Momentum", "Apply to 20 jobs", _B, _APPS, 20, 75),
    TrophyDefinition("persistent_hunter", "Persistent Hunter", "Apply to 30 jobs", _B, _APPS, 30, 65),
    TrophyDefinition("job_seeker", "Job Seeker", "Apply to 40 jobs", _B, _APPS, 40, 55),
    # Silver
    TrophyDefinition("half_century", "Half Century", "Apply to 50 jobs", _S, _APPS, 50, 45),
    TrophyDefinition("interview_ready", "Interview Ready", "Get your first interview", _S, _INTERVIEWS, 1, 40),
    TrophyDefinition(TECHNICAL_TROPHY_ID, "Technical Ace", "Complete 5 technical rounds", _S, _INTERVIEWS, 5, 35),
    TrophyDefinition("networking_pro", "Networking Pro", "Apply to 75 jobs", _S, _APPS, 75, 30),
    # Gold
    TrophyDefinition("century_club", "Century Club", "Apply to 100 jobs", _G, _APPS, 100, 25),
    TrophyDefinition("interview_expert", "Interview Expert", "Complete 10 interviews", _G, _INTERVIEWS, 10, 20),
    TrophyDefinition("offer_magnet", "Offer Magnet", "Receive your first offer", _G, TrophyCategory.offers, 1, 15),
    TrophyDefinition("triple_digits", "Triple Digits", "Apply to 150 jobs", _G, _APPS, 150, 10),
    # Platinum
    TrophyDefinition("career_master", "Career Master", "Land your dream job", _P, TrophyCategory.special, 1, 5),
)

_BY_ID = {t.id: t for t in TROPHIES}


def get_trophy(trophy_id: str) -> Optional[TrophyDefinition]:
    return _BY_ID.get(trophy_id)


def iter_trophies(
    category: Optional[TrophyCategory] = None,
    tier: Optional[TrophyTier] = None,
) -> Iterator[TrophyDefinition]:
    """Walk the catalog in definition order, optionally narrowed by category and tier."""
    for trophy in TROPHIES:
        if category is not None and trophy.category != category:
            continue
        if tier is not None and trophy.tier != tier:
            continue
        yield trophy
