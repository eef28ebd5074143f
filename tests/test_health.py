"""Smoke test for application startup."""


def test_app_imports() -> None:
    """Verify the app can be imported without errors."""
    from ringsledger.main import app

    assert app.title == "RingsLedger"


def test_routes_registered() -> None:
    """Every router is mounted."""
    from ringsledger.main import app

    paths = set(app.openapi()["paths"])

    for path in (
        "/api/login",
        "/api/decks/{deck_id}/import",
        "/api/packs",
        "/api/campaigns/{campaign_id}/scenarios/reorder",
        "/health",
    ):
        assert path in paths
