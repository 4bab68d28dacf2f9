"""API tests for scoring and report endpoints."""

SIGNALS = {
    "assessment_id": "asmt-report-1",
    "user_id": "user-1",
    "scenario_name": "payments-outage",
    "hr_interview": {"communication_score": 5, "technical_depth_score": 4},
    "code_review": {"overall_score": 4, "pattern_score": 4, "maintainability_score": 3},
    "ci_status": {"overall_status": "success", "checks_count": 3},
    "conversations": {"unique_coworkers_contacted": 2, "total_coworker_interactions": 4},
    "timing": {"started_at": "2026-10-01T09:00:00Z", "total_duration_seconds": 5400},
}


class TestScoringEndpoints:
    def test_metadata(self, client):
        resp = client.get("/api/v1/scoring/metadata")
        assert resp.status_code == 200
        data = resp.json()
        assert [c["key"] for c in data["categories"]][:2] == ["communication", "problem_decomposition"]
        assert abs(sum(c["weight"] for c in data["categories"]) - 1.0) < 1e-9
        assert data["levels"][0] == {"min_score": 4.5, "level": "exceptional"}
        assert data["levels"][-1] == {"min_score": None, "level": "needs_improvement"}

    def test_score_signals(self, client):
        resp = client.post("/api/v1/scoring/score", json=SIGNALS)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert len(data["skill_scores"]) == 8
        by_category = {s["category"]: s["score"] for s in data["skill_scores"]}
        assert by_category["communication"] == 5
        assert by_category["xfn_collaboration"] == 4
        assert 1 <= data["overall_score"] <= 5

    def test_score_rejects_out_of_range_status(self, client):
        resp = client.post(
            "/api/v1/scoring/score",
            json={"assessment_id": "a", "ci_status": {"overall_status": "green"}},
        )
        assert resp.status_code == 422


class TestReportEndpoints:
    def test_generate_and_fetch_report(self, client):
        resp = client.post("/api/v1/reports/generate", json={"signals": SIGNALS, "candidate_name": "Ada"})
        assert resp.status_code == 200, resp.text
        report = resp.json()
        assert report["assessment_id"] == "asmt-report-1"
        assert report["candidate_name"] == "Ada"
        assert report["narrative_fallback"] is True
        assert report["metrics"]["tests_status"] == "passing"
        assert report["metrics"]["total_duration_minutes"] == 90

        stored = client.get("/api/v1/reports/asmt-report-1")
        assert stored.status_code == 200
        assert stored.json()["overall_score"] == report["overall_score"]

        markdown = client.get("/api/v1/reports/asmt-report-1/markdown")
        assert markdown.status_code == 200
        assert markdown.headers["content-type"].startswith("text/markdown")
        assert markdown.text.startswith("# Assessment Report")
        assert "Candidate: Ada" in markdown.text

    def test_generate_markdown_format(self, client):
        resp = client.post("/api/v1/reports/generate", json={"signals": SIGNALS, "format": "markdown"})
        assert resp.status_code == 200
        assert "## Skill Scores" in resp.text
        assert "- Tests status: passing" in resp.text

    def test_regenerating_replaces_stored_report(self, client):
        client.post("/api/v1/reports/generate", json={"signals": SIGNALS})
        client.post("/api/v1/reports/generate", json={"signals": SIGNALS, "candidate_name": "Grace"})

        assert client.get("/api/v1/reports/asmt-report-1").json()["candidate_name"] == "Grace"

    def test_unknown_report_is_404(self, client):
        assert client.get("/api/v1/reports/missing").status_code == 404
        assert client.get("/api/v1/reports/missing/markdown").status_code == 404


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": True}
