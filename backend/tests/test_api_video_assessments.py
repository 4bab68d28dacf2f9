"""API tests for video assessment trigger, status, results and admin retry endpoints."""
import uuid

from tests.conftest import valid_evaluation_response, wait_for_background

API = "/api/v1/video-assessments"
ADMIN = "/api/v1/admin/video-assessments"


def _trigger(client, assessment_id=None, **extra):
    body = {
        "assessment_id": assessment_id or f"asmt-{uuid.uuid4().hex[:8]}",
        "video_url": "https://storage.example.com/recordings/session.mp4",
        "candidate_id": "cand-1",
        "task_description": "Fix the flaky retry queue",
    }
    body.update(extra)
    return client.post(f"{API}/trigger", json=body)


class TestTrigger:
    def test_trigger_starts_evaluation(self, client, video_model):
        resp = _trigger(client)
        assert resp.status_code == 202, resp.text
        data = resp.json()
        assert data["success"] is True
        assert data["started"] is True
        assert data["status"] == "pending"

        wait_for_background(client)

        status = client.get(f"{API}/{data['video_assessment_id']}/status").json()
        assert status["status"] == "completed"
        assert status["has_scores"] is True
        assert len(video_model.calls) == 1

    def test_trigger_completed_assessment_is_idempotent(self, client, video_model):
        first = _trigger(client, assessment_id="asmt-idempotent").json()
        wait_for_background(client)

        resp = _trigger(client, assessment_id="asmt-idempotent")

        assert resp.status_code == 202
        assert resp.json()["video_assessment_id"] == first["video_assessment_id"]
        assert resp.json()["started"] is False
        assert resp.json()["status"] == "completed"
        assert len(video_model.calls) == 1

    def test_trigger_validates_body(self, client):
        resp = client.post(f"{API}/trigger", json={"assessment_id": "asmt-x", "video_url": ""})
        assert resp.status_code == 422

    def test_trigger_exhausted_failure_is_400(self, client, video_model):
        video_model.responses = ["not json"]
        assessment_id = "asmt-exhausted"
        for _ in range(3):
            _trigger(client, assessment_id=assessment_id)
            wait_for_background(client)

        resp = _trigger(client, assessment_id=assessment_id)

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Assessment has already failed 3 times."


class TestQueries:
    def test_results_include_scores_and_summary(self, client):
        data = _trigger(client).json()
        wait_for_background(client)

        resp = client.get(f"{API}/{data['video_assessment_id']}/results")

        assert resp.status_code == 200
        body = resp.json()
        assert body["assessment"]["status"] == "completed"
        assert {s["dimension"] for s in body["scores"]} == {"communication", "technical_execution"}
        assert body["summary"]["overall_summary"].startswith("Solid")

    def test_status_by_assessment(self, client):
        data = _trigger(client, assessment_id="asmt-lookup").json()
        wait_for_background(client)

        resp = client.get(f"{API}/by-assessment/asmt-lookup")

        assert resp.status_code == 200
        assert resp.json()["id"] == data["video_assessment_id"]
        assert resp.json()["status"] == "completed"
        assert resp.json()["completed_at"] is not None

    def test_unknown_ids_are_404(self, client):
        assert client.get(f"{API}/missing/status").status_code == 404
        assert client.get(f"{API}/missing/results").status_code == 404
        assert client.get(f"{API}/by-assessment/missing").status_code == 404


class TestAdminRetry:
    def _failed(self, client, video_model):
        video_model.responses = ["not json"]
        data = _trigger(client).json()
        wait_for_background(client)
        video_model.responses = [valid_evaluation_response()]
        return data["video_assessment_id"]

    def test_failed_list_and_retry(self, client, video_model):
        va_id = self._failed(client, video_model)

        failed = client.get(f"{ADMIN}/failed").json()
        entry = next(a for a in failed["assessments"] if a["id"] == va_id)
        assert failed["count"] >= 1
        assert entry["retry_count"] == 1
        assert entry["can_retry"] is True
        assert "not valid JSON" in entry["last_failure_reason"]

        resp = client.post(f"{ADMIN}/retry", json={"video_assessment_id": va_id})
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"success": True, "message": "Retry initiated", "video_assessment_id": va_id}

        wait_for_background(client)
        assert client.get(f"{API}/{va_id}/status").json()["status"] == "completed"

    def test_retry_completed_is_400(self, client):
        va_id = _trigger(client).json()["video_assessment_id"]
        wait_for_background(client)

        resp = client.post(f"{ADMIN}/retry", json={"video_assessment_id": va_id})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cannot retry assessment with status completed."

    def test_force_retry_completed(self, client, video_model):
        va_id = _trigger(client).json()["video_assessment_id"]
        wait_for_background(client)

        resp = client.post(f"{ADMIN}/retry", json={"video_assessment_id": va_id, "force": True})

        assert resp.status_code == 200
        assert resp.json()["message"] == "Force retry initiated"
        wait_for_background(client)
        assert len(video_model.calls) == 2
        status = client.get(f"{API}/{va_id}/status").json()
        assert status["status"] == "completed"
        assert status["retry_count"] == 0

    def test_retry_unknown_is_404(self, client):
        resp = client.post(f"{ADMIN}/retry", json={"video_assessment_id": "missing"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Video assessment not found"
