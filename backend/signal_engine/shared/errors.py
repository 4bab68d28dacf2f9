"""Domain exceptions raised by the scoring and evaluation components."""


class EvaluationResponseParseError(ValueError):
    """The evaluation model returned text that is not a valid rubric assessment."""


class EmptyModelResponseError(RuntimeError):
    """The evaluation model returned no text. Treated as a transient failure."""


class RubricNotFoundError(LookupError):
    pass


class VideoAssessmentNotFoundError(LookupError):
    pass


class RetryNotAllowedError(RuntimeError):
    """A retry was requested for a video assessment that is not eligible."""
