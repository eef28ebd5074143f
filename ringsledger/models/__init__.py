from ringsledger.models.campaign import (
    HERO_FIELDS,
    PLAYER_FIELDS,
    STATE_TEXT_FIELDS,
    CampaignLogType,
    ReorderDirection,
    RunResult,
)
from ringsledger.models.card import RingsCard, RingsPack
from ringsledger.models.deck import DeckCardEntry, DeckContents, DeckListLine
from ringsledger.models.failure import (
    EmptyImportError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    PartialWriteError,
    UpstreamError,
)

__all__ = [
    "CampaignLogType",
    "DeckCardEntry",
    "DeckContents",
    "DeckListLine",
    "EmptyImportError",
    "FailureDetail",
    "FailureKind",
    "HERO_FIELDS",
    "KnownError",
    "NotFoundError",
    "PLAYER_FIELDS",
    "PartialWriteError",
    "ReorderDirection",
    "RingsCard",
    "RingsPack",
    "RunResult",
    "STATE_TEXT_FIELDS",
    "UpstreamError",
]
