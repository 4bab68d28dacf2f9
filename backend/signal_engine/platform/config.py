from pydantic_settings import BaseSettings
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MvpFeatureFlags:
    disable_celery: bool
    disable_narrative_generation: bool
    disable_embeddings: bool


class Settings(BaseSettings):
    # Deployment environment
    DEPLOYMENT_ENV: str = "development"

    # Database
    DATABASE_URL: str = "sqlite:///./signal_engine.db"

    # Google / Gemini (multimodal video evaluation + embeddings)
    GOOGLE_API_KEY: str = ""
    VIDEO_EVALUATION_MODEL: str = "gemini-3-pro-preview"
    VIDEO_EVALUATION_MIME_TYPE: str = "video/mp4"
    EMBEDDING_MODEL: str = "models/text-embedding-004"

    # Claude / Anthropic (narrative + recommendations)
    ANTHROPIC_API_KEY: str = ""
    CLAUDE_MODEL: str = "claude-3-5-haiku-latest"
    MAX_TOKENS_PER_RESPONSE: int = 2048

    # Rubric selection
    DEFAULT_ROLE_FAMILY_SLUG: str = "engineering"

    # Video evaluation retry policy (external model call)
    VIDEO_EVAL_MAX_ATTEMPTS: int = 3
    VIDEO_EVAL_BASE_DELAY_SECONDS: float = 1.0
    VIDEO_EVAL_MAX_DELAY_SECONDS: float = 30.0
    # Manual retry ceiling for FAILED video assessments
    VIDEO_ASSESSMENT_MAX_RETRIES: int = 3
    # Hard limit for one Celery evaluation task
    VIDEO_EVAL_TASK_TIME_LIMIT_SECONDS: int = 900

    # Logging
    LOG_LEVEL: str = "INFO"

    # Redis
    REDIS_URL: str = "redis://localhost:6379"

    # Sentry
    SENTRY_DSN: Optional[str] = None

    # MVP feature flags (default to MVP-safe behavior)
    MVP_DISABLE_CELERY: bool = True
    MVP_DISABLE_NARRATIVE_GENERATION: bool = False
    MVP_DISABLE_EMBEDDINGS: bool = False

    @property
    def resolved_claude_model(self) -> str:
        """Claude model for narrative/recommendation generation. Defaults to claude-3-5-haiku-latest."""
        model = (self.CLAUDE_MODEL or "").strip()
        return model or "claude-3-5-haiku-latest"

    @property
    def resolved_video_evaluation_model(self) -> str:
        model = (self.VIDEO_EVALUATION_MODEL or "").strip()
        return model or "gemini-3-pro-preview"

    @property
    def mvp_flags(self) -> MvpFeatureFlags:
        return MvpFeatureFlags(
            disable_celery=self.MVP_DISABLE_CELERY,
            disable_narrative_generation=self.MVP_DISABLE_NARRATIVE_GENERATION,
            disable_embeddings=self.MVP_DISABLE_EMBEDDINGS,
        )

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
