"""
Tests for the operator endpoints (/admin/api/visits, /admin/api/visits/timeseries, /admin/visits)
and the Basic-auth gate in front of them.
"""
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from sitevisits.api.v1.endpoints.dashboard import WINDOW_LABELS, templates
from sitevisits.main import create_app
from sitevisits.models.stats import VisitStats, WindowStats
from conftest import ADMIN_TOKEN, basic_auth, insert_visit, make_settings, utcnow

ADMIN_PATHS = ["/admin/api/visits", "/admin/api/visits/timeseries", "/admin/visits"]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class TestOperatorAuth:
    @pytest.mark.parametrize("path", ADMIN_PATHS)
    async def test_missing_header_is_challenged(self, client, path):
        resp = await client.get(path)
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == 'Basic realm="Admin"'
        assert resp.text == "Auth required"

    @pytest.mark.parametrize("header", ["Bearer abc", "Basic", "basic " + "Zm9vOmJhcg==", "Basic "])
    async def test_malformed_header_is_challenged(self, client, header):
        resp = await client.get("/admin/api/visits", headers={"Authorization": header})
        assert resp.status_code == 401
        assert "www-authenticate" in resp.headers

    async def test_wrong_password(self, client):
        resp = await client.get("/admin/api/visits", headers=basic_auth("nope"))
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == 'Basic realm="Admin"'
        assert resp.text == "Invalid password"

    @pytest.mark.parametrize("username", ["", "someone-else", "admin"])
    async def test_username_is_ignored(self, client, username):
        resp = await client.get("/admin/api/visits", headers=basic_auth(ADMIN_TOKEN, username=username))
        assert resp.status_code == 200

    async def test_missing_secret_is_server_error(self, db_url):
        app = create_app(make_settings(DATABASE_URL=db_url, ADMIN_TOKEN=None))
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="https://testserver") as c:
                resp = await c.get("/admin/api/visits", headers=basic_auth("anything"))
            assert resp.status_code == 500
            assert resp.headers["content-type"].startswith("text/plain")
            assert "ADMIN_TOKEN" in resp.text
        finally:
            await app.state.visits.close()


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class TestVisitStats:
    async def test_today_counts_page_views_and_unique_visitors(self, app, client, admin_headers):
        visits = app.state.visits
        for _ in range(3):
            await insert_visit(visits, "a" * 32, "/")
        for _ in range(2):
            await insert_visit(visits, "b" * 32, "/about")

        resp = await client.get("/admin/api/visits", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["stats"]["today"] == {"pageViews": 5, "uniqueVisitors": 2}
        assert set(data["stats"]) == {"today", "d7", "d30", "all"}
        assert data["stats"]["all"] == {"pageViews": 5, "uniqueVisitors": 2}

    async def test_query_failure_is_reported(self, app, client, admin_headers):
        visits = app.state.visits
        visits.schema.last_error = "boom"

        resp = await client.get("/admin/api/visits", headers=admin_headers)
        assert resp.status_code == 500
        assert resp.json()["ok"] is False
        assert "boom" in resp.json()["error"]


class TestTimeSeries:
    async def test_default_is_thirty_days(self, client, admin_headers):
        resp = await client.get("/admin/api/visits/timeseries", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["days"] == 30
        assert len(data["series"]) == 30
        assert data["series"][-1]["day"] == utcnow().date().isoformat()
        assert set(data["series"][0]) == {"day", "pageViews", "uniqueVisitors"}

    async def test_days_are_clamped(self, client, admin_headers):
        resp = await client.get("/admin/api/visits/timeseries?days=400", headers=admin_headers)
        data = resp.json()
        assert data["days"] == 365
        assert len(data["series"]) == 365

    async def test_garbage_days_fall_back_to_default(self, client, admin_headers):
        resp = await client.get("/admin/api/visits/timeseries?days=lots", headers=admin_headers)
        assert resp.status_code == 200
        assert len(resp.json()["series"]) == 30

    async def test_series_reflects_activity(self, app, client, admin_headers):
        visits = app.state.visits
        now = utcnow()
        await insert_visit(visits, "a" * 32, "/", now)
        await insert_visit(visits, "a" * 32, "/", now - timedelta(days=1))

        resp = await client.get("/admin/api/visits/timeseries?days=3", headers=admin_headers)
        series = resp.json()["series"]
        assert [p["pageViews"] for p in series] == [0, 1, 1]


class TestDashboard:
    async def test_renders_html(self, app, client, admin_headers):
        await insert_visit(app.state.visits, "a" * 32, "/")

        resp = await client.get("/admin/visits", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "<td>Today</td><td>1</td><td>1</td>" in resp.text
        assert "/admin/api/visits/timeseries?days=30" in resp.text

    async def test_lists_every_window_in_order(self, client, admin_headers):
        resp = await client.get("/admin/visits", headers=admin_headers)
        positions = [resp.text.index(f"<td>{label}</td>") for _, label in WINDOW_LABELS]
        assert positions == sorted(positions)
        assert "<td>All time</td><td>0</td><td>0</td>" in resp.text

    def test_template_escapes_values(self):
        window = WindowStats(page_views=2, unique_visitors=1)
        stats = VisitStats(today=window, d7=window, d30=window, all=window)
        page = templates.get_template("admin/visits.html").render(
            windows=(("today", "<script>x</script>"),), stats=stats, generated_at="<now>"
        )
        assert "<script>x</script>" not in page
        assert "<td>&lt;script&gt;x&lt;/script&gt;</td><td>2</td><td>1</td>" in page
        assert "Updated at &lt;now&gt;." in page


# ---------------------------------------------------------------------------
# Storage not configured
# ---------------------------------------------------------------------------

@pytest.fixture
async def bare_client():
    app = create_app(make_settings(DATABASE_URL=None))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://testserver") as c:
        yield c
    await app.state.visits.close()


class TestStorageNotConfigured:
    async def test_health_reports_disabled(self, bare_client):
        resp = await bare_client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "visits": {"enabled": False, "ready": False, "initError": None}}

    async def test_stats_is_bad_request(self, bare_client, admin_headers):
        resp = await bare_client.get("/admin/api/visits", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json() == {"ok": False, "error": "DATABASE_URL not set"}

    async def test_timeseries_is_bad_request(self, bare_client, admin_headers):
        resp = await bare_client.get("/admin/api/visits/timeseries?days=7", headers=admin_headers)
        assert resp.status_code == 400

    async def test_dashboard_is_bad_request(self, bare_client, admin_headers):
        resp = await bare_client.get("/admin/visits", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.text == "DATABASE_URL not set\n"

    async def test_pages_are_not_tracked(self, bare_client):
        resp = await bare_client.get("/")
        assert "set-cookie" not in resp.headers
