"""Parse raw evaluation-model output into a RubricAssessmentOutput.

The model output is untrusted: only ``overall_score``, ``dimension_scores``
and ``overall_summary`` are mandatory, everything else is defaulted.

Per-dimension evidence arrives in one of two historical shapes:

* v3: ``observable_behaviors`` is a list of ``{"timestamp", "behavior"}``
  objects and the flat timestamp list is projected out of it.
* v2: ``observable_behaviors`` is a list of strings paired by index with a
  separate ``timestamps`` list (a missing timestamp becomes ``""``).

The shape is decided by the first element only.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from .schemas import (
    RUBRIC_EVALUATION_PROMPT_VERSION,
    DetectedRedFlag,
    DimensionHighlight,
    DimensionResult,
    EvidenceConfidence,
    RubricAssessmentOutput,
    RubricPromptInput,
    TimestampedBehavior,
)
from ...platform.config import settings
from ...shared.errors import EvaluationResponseParseError
from ...shared.utils import strip_code_fences

logger = logging.getLogger(__name__)

CONFIDENCE_LABELS = ("high", "medium", "low")
TIMESTAMP_PATTERN = re.compile(r"^(\d{1,2}:)?\d{1,2}:\d{2}$")
MIN_DIMENSION_SCORE = 1
MAX_DIMENSION_SCORE = 5


# ---------------------------------------------------------------------------
# Field coercion helpers
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value if item is not None]


def _as_positional_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value]


def _as_score(value: Any, slug: str) -> Optional[int]:
    if value is None:
        return None
    if _is_number(value) and float(value).is_integer():
        if MIN_DIMENSION_SCORE <= value <= MAX_DIMENSION_SCORE:
            return int(value)
        logger.warning("Dimension %s has out-of-range score %r; treating as insufficient evidence", slug, value)
        return None
    logger.warning("Dimension %s has non-integer score %r; treating as insufficient evidence", slug, value)
    return None


def _as_confidence(value: Any) -> EvidenceConfidence:
    if value is None:
        return EvidenceConfidence(label="medium", asserted=False)
    label = _as_text(value).strip().lower()
    if label in CONFIDENCE_LABELS:
        return EvidenceConfidence(label=label, asserted=True)
    logger.warning("Unrecognised confidence %r; assuming medium", value)
    return EvidenceConfidence(label="medium", asserted=False)


def _is_v3_behaviors(raw_behaviors: Any) -> bool:
    return (
        isinstance(raw_behaviors, list)
        and len(raw_behaviors) > 0
        and isinstance(raw_behaviors[0], dict)
        and "timestamp" in raw_behaviors[0]
    )


def _parse_behaviors(slug: str, data: Dict[str, Any]) -> Tuple[List[TimestampedBehavior], List[str]]:
    raw_behaviors = data.get("observable_behaviors")

    if _is_v3_behaviors(raw_behaviors):
        behaviors: List[TimestampedBehavior] = []
        mixed = False
        for item in raw_behaviors:
            if isinstance(item, dict):
                behaviors.append(
                    TimestampedBehavior(
                        timestamp=_as_text(item.get("timestamp")),
                        behavior=_as_text(item.get("behavior")),
                    )
                )
            else:
                mixed = True
                behaviors.append(TimestampedBehavior(timestamp="", behavior=_as_text(item)))
        if mixed:
            logger.warning("Dimension %s has a mixed-shape observable_behaviors array (v3 first element)", slug)
        return behaviors, [b.timestamp for b in behaviors]

    flat_behaviors = raw_behaviors if isinstance(raw_behaviors, list) else []
    flat_timestamps = _as_positional_text_list(data.get("timestamps"))
    if any(isinstance(item, dict) for item in flat_behaviors):
        logger.warning("Dimension %s has a mixed-shape observable_behaviors array (v2 first element)", slug)
    behaviors = [
        TimestampedBehavior(
            timestamp=flat_timestamps[i] if i < len(flat_timestamps) else "",
            behavior=_as_text(item),
        )
        for i, item in enumerate(flat_behaviors)
    ]
    return behaviors, flat_timestamps


def _parse_dimension(slug: str, data: Any) -> DimensionResult:
    if not isinstance(data, dict):
        logger.warning("Dimension %s is not an object; treating as insufficient evidence", slug)
        data = {}

    behaviors, timestamps = _parse_behaviors(slug, data)
    return DimensionResult(
        dimension_slug=slug,
        dimension_name=slug,
        score=_as_score(data.get("score"), slug),
        summary=_as_text(data.get("summary")),
        confidence=_as_confidence(data.get("confidence")),
        rationale=_as_text(data.get("rationale")),
        observable_behaviors=behaviors,
        timestamps=timestamps,
        trainable_gap=data.get("trainable_gap") is True,
        green_flags=_as_text_list(data.get("green_flags")),
        red_flags=_as_text_list(data.get("red_flags")),
    )


def _parse_highlights(value: Any) -> List[DimensionHighlight]:
    if not isinstance(value, list):
        return []
    highlights = []
    for item in value:
        if not isinstance(item, dict):
            continue
        score = item.get("score")
        highlights.append(
            DimensionHighlight(
                dimension=_as_text(item.get("dimension")),
                score=float(score) if _is_number(score) else 0,
                description=_as_text(item.get("description")),
            )
        )
    return highlights


def _parse_red_flags(value: Any) -> List[DetectedRedFlag]:
    if not isinstance(value, list):
        return []
    flags = []
    for item in value:
        if not isinstance(item, dict) or not item.get("slug"):
            continue
        slug = _as_text(item.get("slug"))
        flags.append(
            DetectedRedFlag(
                slug=slug,
                name=slug,
                evidence=_as_text(item.get("evidence")),
                timestamps=_as_text_list(item.get("timestamps")),
            )
        )
    return flags


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_evaluation_response(
    response_text: str,
    role_family_slug: Optional[str] = None,
) -> RubricAssessmentOutput:
    """Parse raw model text. Raises EvaluationResponseParseError on malformed output."""
    cleaned = strip_code_fences(response_text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise EvaluationResponseParseError(f"Evaluation response is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise EvaluationResponseParseError("Evaluation response must be a JSON object")
    if not _is_number(parsed.get("overall_score")):
        raise EvaluationResponseParseError("Missing or invalid overall_score in response")
    if not isinstance(parsed.get("dimension_scores"), dict):
        raise EvaluationResponseParseError("Missing or invalid dimension_scores in response")
    if not isinstance(parsed.get("overall_summary"), str) or not parsed["overall_summary"]:
        raise EvaluationResponseParseError("Missing or invalid overall_summary in response")

    dimensions = [_parse_dimension(slug, data) for slug, data in parsed["dimension_scores"].items()]
    notes = parsed.get("insufficient_evidence_notes")

    return RubricAssessmentOutput(
        evaluation_version=_as_text(parsed.get("evaluation_version")) or RUBRIC_EVALUATION_PROMPT_VERSION,
        role_family_slug=_as_text(parsed.get("role_family_slug"))
        or role_family_slug
        or settings.DEFAULT_ROLE_FAMILY_SLUG,
        overall_score=float(parsed["overall_score"]),
        dimension_scores=dimensions,
        detected_red_flags=_parse_red_flags(parsed.get("detected_red_flags")),
        top_strengths=_parse_highlights(parsed.get("top_strengths")),
        growth_areas=_parse_highlights(parsed.get("growth_areas")),
        overall_summary=parsed["overall_summary"],
        evaluation_confidence=_as_confidence(parsed.get("evaluation_confidence")),
        insufficient_evidence_notes=_as_text(notes) if notes else None,
    )


def enrich_dimension_names(evaluation: RubricAssessmentOutput, rubric: RubricPromptInput) -> RubricAssessmentOutput:
    """Fill display names from rubric metadata. Unknown slugs keep the slug as name."""
    dimensions = rubric.dimension_lookup()
    red_flags = {f.slug: f for f in rubric.red_flags}

    for result in evaluation.dimension_scores:
        meta = dimensions.get(result.dimension_slug)
        if meta is not None:
            result.dimension_name = meta.name
        else:
            logger.info("Dimension %s is not in rubric %s", result.dimension_slug, rubric.role_family_slug)

    for flag in evaluation.detected_red_flags:
        meta_flag = red_flags.get(flag.slug)
        if meta_flag is not None:
            flag.name = meta_flag.name
            flag.description = meta_flag.description

    return evaluation


def format_timestamps(timestamps: List[str]) -> List[str]:
    """Keep only MM:SS / H:MM:SS timestamps for storage."""
    return [ts for ts in timestamps if isinstance(ts, str) and TIMESTAMP_PATTERN.match(ts)]
