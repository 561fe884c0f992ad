"""Application configuration."""
import sys
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./deptracker.db"

    # Environment configuration
    ENVIRONMENT: str = "development"  # "development" or "production"
    LOG_LEVEL: str = "INFO"

    # CORS configuration - comma-separated origins
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:5174"

    # Issue tracker connection, used when no integration config is stored
    JIRA_BASE_URL: str = ""
    JIRA_EMAIL: str = ""
    JIRA_API_TOKEN: str = ""
    JIRA_USE_OAUTH: bool = False
    JIRA_OAUTH_TOKEN: str = ""
    JIRA_TEAM_FIELD: str = "customfield_10010"
    JIRA_ART_FIELD: str = "customfield_10011"
    JIRA_SEARCH_PAGE_SIZE: int = 100

    # Synthetic tracker for environments without live credentials
    JIRA_DEMO_MODE: bool = False

    # External collaborator processes - empty means unavailable
    RISK_SCORER_COMMAND: str = ""
    RISK_ANALYZER_COMMAND: str = ""
    SCENARIO_GENERATOR_COMMAND: str = ""
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = 10.0

    SEED_SAMPLE_DATA: bool = False

    class Config:
        env_file = ".env"

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def validate_production_settings(self) -> None:
        """Validate settings for production environment.

        Prints warnings for settings that only make sense in development.
        """
        if self.ENVIRONMENT == "production":
            if self.JIRA_DEMO_MODE:
                print("WARNING: Jira demo mode is enabled in production!", file=sys.stderr)
                print("Imports will use synthetic issues. Set JIRA_DEMO_MODE=false", file=sys.stderr)

            if self.DATABASE_URL.startswith("sqlite:///:memory:"):
                print("WARNING: In-memory dependency store configured in production!", file=sys.stderr)


settings = Settings()
# Validate on startup
settings.validate_production_settings()
