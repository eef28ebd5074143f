"""
RingsLedger services.

Deck list codec, list repositioning, card database access and the
aggregations shown on the deck and campaign pages.
"""

from ringsledger.services.autosave import AutosaveStatus, DebouncedAutosaver
from ringsledger.services.campaign_stats import (
    active_players,
    campaign_total,
    computed_total_score,
)
from ringsledger.services.deck_list_formatter import TYPE_BUCKETS, format_deck_list
from ringsledger.services.deck_list_parser import decode_deck_list, parse_deck_list_lines
from ringsledger.services.deck_stats import (
    CardUsage,
    card_usage,
    deck_main_size,
    deck_primary_spheres,
    deck_sphere_counts,
    deck_type_counts,
)
from ringsledger.services.reorder import PositionSwap, next_position, plan_position_swap
from ringsledger.services.ringsdb import (
    RingsDBClient,
    build_card_index,
    card_stats_line,
    get_ringsdb_client,
    is_player_card,
    resolve_cards,
)

__all__ = [
    "AutosaveStatus",
    "CardUsage",
    "DebouncedAutosaver",
    "PositionSwap",
    "RingsDBClient",
    "TYPE_BUCKETS",
    "active_players",
    "build_card_index",
    "campaign_total",
    "card_stats_line",
    "card_usage",
    "computed_total_score",
    "deck_main_size",
    "deck_primary_spheres",
    "deck_sphere_counts",
    "deck_type_counts",
    "decode_deck_list",
    "format_deck_list",
    "get_ringsdb_client",
    "is_player_card",
    "next_position",
    "parse_deck_list_lines",
    "plan_position_swap",
    "resolve_cards",
]
