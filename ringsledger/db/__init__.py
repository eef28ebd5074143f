from ringsledger.db.database import get_session, init_db
from ringsledger.db.operations import (
    CampaignSummary,
    RunDeck,
    add_log_entry,
    add_scenario,
    coerce_state_changes,
    create_campaign,
    create_deck,
    create_run,
    deck_to_contents,
    delete_campaign,
    delete_deck,
    enabled_pack_codes,
    get_campaign,
    get_card_usage,
    get_deck,
    get_latest_run,
    get_or_create_state,
    get_owned,
    list_campaign_summaries,
    list_campaigns,
    list_deck_summaries,
    list_decks,
    list_log_entries,
    list_packs,
    list_runs,
    list_scenarios,
    patch_campaign_state,
    rename_deck,
    reorder_scenario,
    replace_deck_contents,
    require_campaign,
    require_deck,
    run_scores,
    set_deck_card_qty,
    set_deck_heroes,
    set_pack_enabled,
    sync_pack_catalog,
    update_campaign,
    upsert_owned,
    upsert_owned_bulk,
)

__all__ = [
    "CampaignSummary",
    "RunDeck",
    "add_log_entry",
    "add_scenario",
    "coerce_state_changes",
    "create_campaign",
    "create_deck",
    "create_run",
    "deck_to_contents",
    "delete_campaign",
    "delete_deck",
    "enabled_pack_codes",
    "get_campaign",
    "get_card_usage",
    "get_deck",
    "get_latest_run",
    "get_or_create_state",
    "get_owned",
    "get_session",
    "init_db",
    "list_campaign_summaries",
    "list_campaigns",
    "list_deck_summaries",
    "list_decks",
    "list_log_entries",
    "list_packs",
    "list_runs",
    "list_scenarios",
    "patch_campaign_state",
    "rename_deck",
    "reorder_scenario",
    "replace_deck_contents",
    "require_campaign",
    "require_deck",
    "run_scores",
    "set_deck_card_qty",
    "set_deck_heroes",
    "set_pack_enabled",
    "sync_pack_catalog",
    "update_campaign",
    "upsert_owned",
    "upsert_owned_bulk",
]
