from enum import Enum


class RunResult(str, Enum):
    """Outcome of a logged play of a scenario."""

    WIN = "win"
    LOSS = "loss"
    CONCEDE = "concede"


class ReorderDirection(str, Enum):
    """Single-step move within an ordered list."""

    UP = "up"
    DOWN = "down"


class CampaignLogType(str, Enum):
    """Event types appended to the campaign log."""

    CAMPAIGN_CREATED = "campaign_created"
    CAMPAIGN_UPDATED = "campaign_updated"
    SCENARIO_ADDED = "scenario_added"
    RUN_CREATED = "run_created"


# Free-text columns of the campaign state row
STATE_TEXT_FIELDS: tuple[str, ...] = (
    "player1",
    "player2",
    "player3",
    "player4",
    "heroes_p1",
    "heroes_p2",
    "heroes_p3",
    "heroes_p4",
    "fallen_heroes",
    "notes",
    "boons",
    "burdens",
)

PLAYER_FIELDS: tuple[str, ...] = ("player1", "player2", "player3", "player4")

HERO_FIELDS: tuple[str, ...] = ("heroes_p1", "heroes_p2", "heroes_p3", "heroes_p4")
