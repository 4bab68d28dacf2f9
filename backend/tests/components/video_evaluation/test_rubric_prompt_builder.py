from signal_engine.components.video_evaluation.prompt_builder import (
    build_rubric_evaluation_prompt,
    build_video_context_section,
)
from signal_engine.components.video_evaluation.schemas import (
    DimensionWithRubric,
    RedFlagData,
    RubricLevelData,
    RubricPromptInput,
    VideoContext,
)


def _rubric(red_flags=None, video_context=None):
    levels = [
        RubricLevelData(level=level, label=label, pattern=f"{label} pattern", evidence=[f"{label} evidence"])
        for level, label in [(4, "Expert"), (1, "Foundational"), (3, "Advanced"), (2, "Competent")]
    ]
    return RubricPromptInput(
        role_family_name="Software Engineering",
        role_family_slug="engineering",
        dimensions=[
            DimensionWithRubric(slug="work_process", name="Work Process", description="How work gets done.", levels=levels),
            DimensionWithRubric(slug="communication", name="Communication", levels=levels),
        ],
        red_flags=red_flags or [],
        video_context=video_context,
    )


def test_prompt_lists_every_dimension_with_sorted_levels():
    prompt = build_rubric_evaluation_prompt(_rubric())

    assert "for a **Software Engineering** role" in prompt
    assert "## 2-DIMENSION RUBRIC (Software Engineering)" in prompt
    assert "### 1. WORK_PROCESS - Work Process" in prompt
    assert "### 2. COMMUNICATION - Communication" in prompt
    assert prompt.index("**Level 1 - Foundational**") < prompt.index("**Level 4 - Expert**")
    assert "*Pattern: Competent pattern*" in prompt
    assert "  - Advanced evidence" in prompt


def test_output_schema_names_each_dimension_and_version():
    prompt = build_rubric_evaluation_prompt(_rubric())

    assert '"evaluation_version": "3.0.0"' in prompt
    assert '"work_process": {' in prompt
    assert '"communication": {' in prompt
    assert '"detected_red_flags": [],' in prompt
    assert prompt.rstrip().endswith("markdown code blocks around the response.")


def test_red_flags_section_only_when_flags_exist():
    assert "## RED FLAGS" not in build_rubric_evaluation_prompt(_rubric())

    prompt = build_rubric_evaluation_prompt(
        _rubric(red_flags=[RedFlagData(slug="no_verification", name="No Verification", description="Never tested.")])
    )

    assert "## RED FLAGS" in prompt
    assert "- **No Verification** (`no_verification`): Never tested." in prompt
    assert '"slug": "<red flag slug from the list above>"' in prompt


def test_video_context_section():
    context = VideoContext(
        video_duration_minutes=45,
        task_description="Fix the flaky retry queue",
        expected_outcomes=["Tests pass", "Root cause explained"],
    )

    prompt = build_rubric_evaluation_prompt(_rubric(video_context=context))

    assert "## VIDEO CONTEXT" in prompt
    assert "- Video Duration: 45 minutes" in prompt
    assert "- Task Description: Fix the flaky retry queue" in prompt
    assert "- Expected Outcomes:\n  - Tests pass\n  - Root cause explained" in prompt
    # Context comes before the output requirements
    assert prompt.index("## VIDEO CONTEXT") < prompt.index("## OUTPUT REQUIREMENTS")


def test_empty_video_context_is_omitted():
    assert build_video_context_section(None) == ""
    assert build_video_context_section(VideoContext()) == ""
    assert "## VIDEO CONTEXT" not in build_rubric_evaluation_prompt(_rubric(video_context=VideoContext()))
