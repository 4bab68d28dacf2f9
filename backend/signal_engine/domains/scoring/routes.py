from fastapi import APIRouter

from ...components.scoring.metadata import scoring_metadata_payload
from ...components.scoring.schemas import AggregatedScore
from ...components.scoring.service import score_signals
from ...components.scoring.signals import AssessmentSignals

router = APIRouter(prefix="/scoring", tags=["Scoring"])


@router.get("/metadata")
def get_scoring_metadata():
    return scoring_metadata_payload()


@router.post("/score", response_model=AggregatedScore)
def score(signals: AssessmentSignals):
    return score_signals(signals)
