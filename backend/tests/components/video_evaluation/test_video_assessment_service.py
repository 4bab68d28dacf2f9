"""Trigger / retry / force-retry / query service functions."""

import pytest

from signal_engine.components.video_evaluation.repository import get_video_assessment
from signal_engine.components.video_evaluation.service import (
    force_retry_video_assessment,
    get_evaluation_results,
    get_evaluation_status,
    get_video_assessment_status_by_assessment,
    list_failed_assessments,
    retry_video_assessment,
    trigger_video_assessment,
)
from signal_engine.models.video_assessment import VideoAssessmentStatus
from signal_engine.shared.background import drain_detached_tasks
from signal_engine.shared.errors import VideoAssessmentNotFoundError
from tests.conftest import FakeVideoModel, create_video_assessment, make_pipeline, valid_evaluation_response


async def test_trigger_creates_and_evaluates(session_factory, seeded_db):
    model = FakeVideoModel(valid_evaluation_response())
    pipeline = make_pipeline(session_factory, model)

    result = await trigger_video_assessment(
        seeded_db,
        assessment_id="asmt-42",
        video_url="https://storage.example.com/asmt-42.mp4",
        candidate_id="cand-42",
        pipeline=pipeline,
    )
    await drain_detached_tasks()

    assert result["success"] is True
    assert result["started"] is True
    status = await get_evaluation_status(seeded_db, result["video_assessment_id"])
    assert status["status"] == "completed"
    assert status["has_scores"] is True
    assert status["has_summary"] is True
    assert len(model.calls) == 1


async def test_trigger_twice_reuses_row_and_runs_once(session_factory, seeded_db):
    model = FakeVideoModel(valid_evaluation_response())
    pipeline = make_pipeline(session_factory, model)
    kwargs = dict(assessment_id="asmt-7", video_url="https://storage.example.com/asmt-7.mp4", pipeline=pipeline)

    first = await trigger_video_assessment(seeded_db, **kwargs)
    second = await trigger_video_assessment(seeded_db, **kwargs)
    await drain_detached_tasks()

    assert first["video_assessment_id"] == second["video_assessment_id"]
    assert len(model.calls) == 1


async def test_trigger_on_completed_does_not_start(session_factory, seeded_db):
    va = await create_video_assessment(seeded_db, status=VideoAssessmentStatus.COMPLETED)
    model = FakeVideoModel(valid_evaluation_response())

    result = await trigger_video_assessment(
        seeded_db, assessment_id=va.assessment_id, video_url=va.video_url, pipeline=make_pipeline(session_factory, model)
    )

    assert result == {
        "success": True,
        "video_assessment_id": va.id,
        "error": None,
        "status": "completed",
        "started": False,
    }
    assert model.calls == []


async def test_trigger_on_exhausted_failure_is_refused(session_factory, seeded_db):
    va = await create_video_assessment(seeded_db, status=VideoAssessmentStatus.FAILED, retry_count=3)

    result = await trigger_video_assessment(
        seeded_db,
        assessment_id=va.assessment_id,
        video_url=va.video_url,
        pipeline=make_pipeline(session_factory, FakeVideoModel(valid_evaluation_response())),
    )

    assert result["success"] is False
    assert result["error"] == "Assessment has already failed 3 times."


async def test_retry_completed_is_rejected(session_factory, seeded_db):
    va = await create_video_assessment(seeded_db, status=VideoAssessmentStatus.COMPLETED)

    result = await retry_video_assessment(seeded_db, va.id, pipeline=make_pipeline(session_factory, FakeVideoModel("")))

    assert result["success"] is False
    assert result["error"] == "Cannot retry assessment with status completed."


async def test_retry_failed_at_ceiling_is_rejected(session_factory, seeded_db):
    va = await create_video_assessment(seeded_db, status=VideoAssessmentStatus.FAILED, retry_count=3)
    model = FakeVideoModel(valid_evaluation_response())

    result = await retry_video_assessment(seeded_db, va.id, pipeline=make_pipeline(session_factory, model))

    assert result["success"] is False
    assert result["error"] == "Assessment has already failed 3 times."
    assert model.calls == []
    row = await get_video_assessment(seeded_db, va.id)
    assert row.status == VideoAssessmentStatus.FAILED


async def test_retry_failed_below_ceiling_runs_again(session_factory, seeded_db):
    va = await create_video_assessment(
        seeded_db, status=VideoAssessmentStatus.FAILED, retry_count=1, last_failure_reason="model timed out"
    )
    model = FakeVideoModel(valid_evaluation_response())

    result = await retry_video_assessment(seeded_db, va.id, pipeline=make_pipeline(session_factory, model))
    await drain_detached_tasks()

    assert result["success"] is True
    assert len(model.calls) == 1
    row = await get_video_assessment(seeded_db, va.id)
    assert row.status == VideoAssessmentStatus.COMPLETED
    assert row.retry_count == 1


async def test_retry_unknown_id(session_factory, seeded_db):
    result = await retry_video_assessment(seeded_db, "missing", pipeline=make_pipeline(session_factory, FakeVideoModel("")))
    assert result == {"success": False, "video_assessment_id": None, "error": "Video assessment not found"}


@pytest.mark.parametrize(
    "status",
    [VideoAssessmentStatus.FAILED, VideoAssessmentStatus.COMPLETED, VideoAssessmentStatus.PENDING],
)
async def test_force_retry_resets_from_any_state(session_factory, seeded_db, status):
    va = await create_video_assessment(seeded_db, status=status, retry_count=3, last_failure_reason="boom")
    model = FakeVideoModel(valid_evaluation_response())

    result = await force_retry_video_assessment(seeded_db, va.id, pipeline=make_pipeline(session_factory, model))

    assert result["success"] is True
    row = await get_video_assessment(seeded_db, va.id)
    assert row.retry_count == 0
    assert row.last_failure_reason is None
    await drain_detached_tasks()
    row = await get_video_assessment(seeded_db, va.id)
    assert row.status == VideoAssessmentStatus.COMPLETED


async def test_list_failed_assessments_reports_can_retry(seeded_db):
    await create_video_assessment(seeded_db, assessment_id="a-1", status=VideoAssessmentStatus.FAILED, retry_count=1)
    await create_video_assessment(seeded_db, assessment_id="a-2", status=VideoAssessmentStatus.FAILED, retry_count=3)
    await create_video_assessment(seeded_db, assessment_id="a-3", status=VideoAssessmentStatus.COMPLETED)

    items = await list_failed_assessments(seeded_db)

    by_assessment = {item["assessment_id"]: item for item in items}
    assert set(by_assessment) == {"a-1", "a-2"}
    assert by_assessment["a-1"]["can_retry"] is True
    assert by_assessment["a-2"]["can_retry"] is False


async def test_query_accessors(session_factory, seeded_db):
    va = await create_video_assessment(seeded_db)
    await make_pipeline(session_factory, FakeVideoModel(valid_evaluation_response())).evaluate(va.id, va.video_url)

    results = await get_evaluation_results(seeded_db, va.id)
    assert results["assessment"]["status"] == "completed"
    assert [s["dimension"] for s in results["scores"]] == ["communication", "technical_execution"]
    assert results["scores"][0]["observable_behaviors"][0] == {
        "timestamp": "02:15",
        "behavior": "Walked the reviewer through the queue design",
    }
    assert results["summary"]["overall_summary"].startswith("Solid")

    by_assessment = await get_video_assessment_status_by_assessment(seeded_db, va.assessment_id)
    assert by_assessment["id"] == va.id
    assert by_assessment["status"] == "completed"
    assert await get_video_assessment_status_by_assessment(seeded_db, "nope") is None

    with pytest.raises(VideoAssessmentNotFoundError):
        await get_evaluation_status(seeded_db, "nope")
    with pytest.raises(VideoAssessmentNotFoundError):
        await get_evaluation_results(seeded_db, "nope")
