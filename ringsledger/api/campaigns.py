"""
Campaign API endpoints.

Campaigns, their ordered scenarios, logged runs, the free-form campaign
state sheet and the campaign event log.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ringsledger.config import MAX_HERO_NAME_LOOKUPS
from ringsledger.db import (
    add_scenario,
    create_campaign,
    create_run,
    delete_campaign,
    get_latest_run,
    get_or_create_state,
    list_campaign_summaries,
    list_campaigns,
    list_log_entries,
    list_runs,
    list_scenarios,
    patch_campaign_state,
    reorder_scenario,
    require_campaign,
    run_scores,
    update_campaign,
)
from ringsledger.db.database import get_session
from ringsledger.models.campaign import ReorderDirection, RunResult
from ringsledger.models.db import (
    CampaignDB,
    CampaignRunDB,
    CampaignScenarioDB,
    CampaignStateDB,
)
from ringsledger.models.failure import NotFoundError
from ringsledger.services.campaign_stats import campaign_total, computed_total_score
from ringsledger.services.family_auth import require_family_session
from ringsledger.services.ringsdb import RingsDBClient, get_ringsdb_client, resolve_cards

router = APIRouter(
    prefix="/api/campaigns",
    tags=["campaigns"],
    dependencies=[Depends(require_family_session)],
)


# --- Campaigns ---


class CampaignModel(BaseModel):
    id: int
    name: str
    description: str | None = None
    ruleset: str
    created_at: datetime
    updated_at: datetime


class CampaignResponse(BaseModel):
    campaign: CampaignModel


class CampaignListResponse(BaseModel):
    campaigns: list[CampaignModel]


class CampaignCreateRequest(BaseModel):
    name: str = ""
    description: str | None = None
    ruleset: str | None = Field(default=None, description="Defaults to 'custom'")


class CampaignPatchRequest(BaseModel):
    """Only the fields present in the body are changed."""

    name: str | None = None
    description: str | None = None
    ruleset: str | None = None


class SummaryDeck(BaseModel):
    id: int
    name: str


class CampaignSummaryModel(BaseModel):
    """Overview of a campaign for the campaign list."""

    id: int
    name: str
    ruleset: str
    created_at: datetime
    updated_at: datetime
    players: list[str] = Field(default_factory=list)
    decks: list[SummaryDeck] = Field(default_factory=list)
    score_total: int = 0


class CampaignSummaryResponse(BaseModel):
    campaigns: list[CampaignSummaryModel]


class OkResponse(BaseModel):
    ok: bool


def _campaign_model(campaign: CampaignDB) -> CampaignModel:
    return CampaignModel(
        id=campaign.id,
        name=campaign.name,
        description=campaign.description,
        ruleset=campaign.ruleset,
        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
    )


@router.get("", response_model=CampaignListResponse)
async def get_campaigns(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CampaignListResponse:
    """List campaigns, most recently updated first."""
    return CampaignListResponse(campaigns=[_campaign_model(c) for c in await list_campaigns(session)])


@router.post("", response_model=CampaignResponse)
async def post_campaign(
    request: CampaignCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CampaignResponse:
    """Create a campaign."""
    name = request.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name is required",
        )
    campaign = await create_campaign(session, name, request.description, request.ruleset)
    return CampaignResponse(campaign=_campaign_model(campaign))


@router.get("/summary", response_model=CampaignSummaryResponse)
async def get_campaign_summaries(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CampaignSummaryResponse:
    """Every campaign with its players, decks used and score total."""
    summaries = await list_campaign_summaries(session)
    return CampaignSummaryResponse(
        campaigns=[
            CampaignSummaryModel(
                id=s.campaign.id,
                name=s.campaign.name,
                ruleset=s.campaign.ruleset,
                created_at=s.campaign.created_at,
                updated_at=s.campaign.updated_at,
                players=s.players,
                decks=[SummaryDeck(id=deck_id, name=name) for deck_id, name in s.decks],
                score_total=s.score_total,
            )
            for s in summaries
        ]
    )


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign_detail(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CampaignResponse:
    return CampaignResponse(campaign=_campaign_model(await require_campaign(session, campaign_id)))


@router.patch("/{campaign_id}", response_model=CampaignResponse)
async def patch_campaign(
    campaign_id: int,
    request: CampaignPatchRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CampaignResponse:
    """Update the provided fields of a campaign."""
    provided = request.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}

    if provided.get("name") is not None:
        name = provided["name"].strip()
        if not name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name cannot be empty",
            )
        changes["name"] = name
    if "description" in provided:
        changes["description"] = provided["description"]
    if provided.get("ruleset") is not None:
        changes["ruleset"] = provided["ruleset"].strip() or "custom"

    campaign = await update_campaign(session, campaign_id, changes)
    return CampaignResponse(campaign=_campaign_model(campaign))


@router.delete("/{campaign_id}", response_model=OkResponse)
async def remove_campaign(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OkResponse:
    """Delete a campaign and everything recorded under it."""
    if not await delete_campaign(session, campaign_id):
        raise NotFoundError("Campaign", campaign_id)
    return OkResponse(ok=True)


# --- Scenarios ---


class ScenarioModel(BaseModel):
    id: int
    campaign_id: int
    title: str
    pack_code: str | None = None
    scenario_code: str | None = None
    position: int
    created_at: datetime


class ScenarioResponse(BaseModel):
    scenario: ScenarioModel


class ScenarioListResponse(BaseModel):
    scenarios: list[ScenarioModel]


class ScenarioCreateRequest(BaseModel):
    title: str = ""
    pack_code: str | None = None
    scenario_code: str | None = None


class ReorderRequest(BaseModel):
    scenario_id: int | None = None
    direction: ReorderDirection = ReorderDirection.UP


class ReorderResponse(BaseModel):
    """`moved` is False when the scenario was already at that end of the list."""

    ok: bool
    moved: bool


def _scenario_model(scenario: CampaignScenarioDB) -> ScenarioModel:
    return ScenarioModel(
        id=scenario.id,
        campaign_id=scenario.campaign_id,
        title=scenario.title,
        pack_code=scenario.pack_code,
        scenario_code=scenario.scenario_code,
        position=scenario.position,
        created_at=scenario.created_at,
    )


@router.get("/{campaign_id}/scenarios", response_model=ScenarioListResponse)
async def get_scenarios(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ScenarioListResponse:
    """Scenarios in order."""
    await require_campaign(session, campaign_id)
    scenarios = await list_scenarios(session, campaign_id)
    return ScenarioListResponse(scenarios=[_scenario_model(s) for s in scenarios])


@router.post("/{campaign_id}/scenarios", response_model=ScenarioResponse)
async def post_scenario(
    campaign_id: int,
    request: ScenarioCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ScenarioResponse:
    """Append a scenario to the end of the campaign."""
    title = request.title.strip()
    if not title:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title is required",
        )
    scenario = await add_scenario(
        session, campaign_id, title, request.pack_code, request.scenario_code
    )
    return ScenarioResponse(scenario=_scenario_model(scenario))


@router.post("/{campaign_id}/scenarios/reorder", response_model=ReorderResponse)
async def post_reorder(
    campaign_id: int,
    request: ReorderRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ReorderResponse:
    """
    Move a scenario one step up or down.

    Moving the first scenario up or the last one down succeeds without
    changing anything.
    """
    if request.scenario_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="scenario_id required",
        )
    await require_campaign(session, campaign_id)
    moved = await reorder_scenario(session, campaign_id, request.scenario_id, request.direction)
    return ReorderResponse(ok=True, moved=moved)


# --- Runs ---


class RunModel(BaseModel):
    id: int
    campaign_id: int
    scenario_id: int | None = None
    played_at: datetime
    result: str
    score: int | None = None
    threat_end: int | None = None
    rounds: int | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class RunResponse(BaseModel):
    run: RunModel


class RunListResponse(BaseModel):
    runs: list[RunModel]


class DeckLink(BaseModel):
    deck_id: int
    role: str | None = None


class RunCreateRequest(BaseModel):
    """Request model for logging a run."""

    result: str = Field(default="", description="win, loss or concede")
    scenario_id: int | None = None
    played_at: datetime | None = None
    score: int | None = None
    threat_end: int | None = None
    rounds: int | None = None
    notes: str | None = None
    deck_links: list[DeckLink] = Field(default_factory=list)


class HeroInfo(BaseModel):
    code: str
    name: str | None = None


class LatestRunDeck(BaseModel):
    id: int
    name: str
    role: str | None = None
    heroes: list[HeroInfo] = Field(default_factory=list)


class LatestRunResponse(BaseModel):
    run: RunModel | None = None
    decks: list[LatestRunDeck] = Field(default_factory=list)


def _run_model(run: CampaignRunDB) -> RunModel:
    return RunModel(
        id=run.id,
        campaign_id=run.campaign_id,
        scenario_id=run.scenario_id,
        played_at=run.played_at,
        result=run.result,
        score=run.score,
        threat_end=run.threat_end,
        rounds=run.rounds,
        notes=run.notes,
        created_at=run.created_at,
        updated_at=run.updated_at,
    )


@router.get("/{campaign_id}/runs", response_model=RunListResponse)
async def get_runs(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RunListResponse:
    """Runs, most recently played first."""
    await require_campaign(session, campaign_id)
    return RunListResponse(runs=[_run_model(r) for r in await list_runs(session, campaign_id)])


@router.post("/{campaign_id}/runs", response_model=RunResponse)
async def post_run(
    campaign_id: int,
    request: RunCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RunResponse:
    """Log a run and the decks that played it."""
    raw_result = request.result.strip().lower()
    if not raw_result:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="result required",
        )
    try:
        result = RunResult(raw_result)
    except ValueError as e:
        valid = ", ".join(r.value for r in RunResult)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"result must be one of: {valid}",
        ) from e

    run = await create_run(
        session,
        campaign_id,
        result,
        scenario_id=request.scenario_id,
        played_at=request.played_at,
        score=request.score,
        threat_end=request.threat_end,
        rounds=request.rounds,
        notes=request.notes,
        deck_links=[(link.deck_id, link.role) for link in request.deck_links],
    )
    return RunResponse(run=_run_model(run))


@router.get("/{campaign_id}/runs/latest", response_model=LatestRunResponse)
async def get_latest(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[RingsDBClient, Depends(get_ringsdb_client)],
) -> LatestRunResponse:
    """
    The latest run with its decks and their heroes.

    Hero names are looked up best-effort; a failed lookup leaves the
    name null instead of failing the request.
    """
    await require_campaign(session, campaign_id)
    run, decks = await get_latest_run(session, campaign_id)
    if run is None:
        return LatestRunResponse(run=None, decks=[])

    hero_codes = list(dict.fromkeys(code for deck in decks for code in deck.hero_codes))
    names = {
        code: card.name
        for code, card in (
            await resolve_cards(client, hero_codes[:MAX_HERO_NAME_LOOKUPS])
        ).items()
    }

    return LatestRunResponse(
        run=_run_model(run),
        decks=[
            LatestRunDeck(
                id=deck.deck_id,
                name=deck.name,
                role=deck.role,
                heroes=[HeroInfo(code=code, name=names.get(code)) for code in deck.hero_codes],
            )
            for deck in decks
        ],
    )


# --- State ---


class StateModel(BaseModel):
    """The campaign sheet plus its computed score totals."""

    campaign_id: int
    player1: str | None = None
    player2: str | None = None
    player3: str | None = None
    player4: str | None = None
    heroes_p1: str | None = None
    heroes_p2: str | None = None
    heroes_p3: str | None = None
    heroes_p4: str | None = None
    fallen_heroes: str | None = None
    threat_penalty: int = 0
    notes: str | None = None
    boons: str | None = None
    burdens: str | None = None
    campaign_total_override: int | None = None
    updated_at: datetime | None = None
    computed_total_score: int = 0
    campaign_total: int = 0


class StateResponse(BaseModel):
    state: StateModel


async def _state_response(session: AsyncSession, state: CampaignStateDB) -> StateResponse:
    scores = await run_scores(session, state.campaign_id)
    return StateResponse(
        state=StateModel(
            campaign_id=state.campaign_id,
            player1=state.player1,
            player2=state.player2,
            player3=state.player3,
            player4=state.player4,
            heroes_p1=state.heroes_p1,
            heroes_p2=state.heroes_p2,
            heroes_p3=state.heroes_p3,
            heroes_p4=state.heroes_p4,
            fallen_heroes=state.fallen_heroes,
            threat_penalty=state.threat_penalty or 0,
            notes=state.notes,
            boons=state.boons,
            burdens=state.burdens,
            campaign_total_override=state.campaign_total_override,
            updated_at=state.updated_at,
            computed_total_score=computed_total_score(scores),
            campaign_total=campaign_total(state.campaign_total_override, scores),
        )
    )


@router.get("/{campaign_id}/state", response_model=StateResponse)
async def get_state(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StateResponse:
    """The campaign sheet, created empty on first access."""
    return await _state_response(session, await get_or_create_state(session, campaign_id))


@router.patch("/{campaign_id}/state", response_model=StateResponse)
async def patch_state(
    campaign_id: int,
    changes: Annotated[dict[str, Any], Body()],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StateResponse:
    """
    Update only the provided sheet fields.

    Text fields are stored as strings, threat_penalty as an integer
    (invalid values become 0) and campaign_total_override as an integer
    or null.
    """
    state = await patch_campaign_state(session, campaign_id, changes)
    return await _state_response(session, state)


# --- Log ---


class LogEntryModel(BaseModel):
    id: int
    campaign_id: int
    run_id: int | None = None
    type: str
    message: str
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class LogResponse(BaseModel):
    entries: list[LogEntryModel]


@router.get("/{campaign_id}/log", response_model=LogResponse)
async def get_log(
    campaign_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LogResponse:
    """Campaign events, newest first."""
    await require_campaign(session, campaign_id)
    entries = await list_log_entries(session, campaign_id)
    return LogResponse(
        entries=[
            LogEntryModel(
                id=e.id,
                campaign_id=e.campaign_id,
                run_id=e.run_id,
                type=e.type,
                message=e.message,
                meta=e.meta or {},
                created_at=e.created_at,
            )
            for e in entries
        ]
    )
