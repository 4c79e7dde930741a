from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Database (catalog tables and the submission store share one database)
	database_url: str = Field(default="sqlite:///./practice.db", validation_alias="DATABASE_URL")

	# Identity tokens are issued elsewhere; we only verify them
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")

	# Skills whose items are machine-graded. JSON list in the environment,
	# e.g. PRACTICE_AUTO_GRADED_SKILLS='["listening","reading"]'
	auto_graded_skills: list[str] = Field(default=["listening", "reading"], validation_alias="PRACTICE_AUTO_GRADED_SKILLS")

	# Leaderboard size when the caller gives none, and the hard cap
	leaderboard_limit: int = Field(default=20, validation_alias="LEADERBOARD_LIMIT")
	leaderboard_max_limit: int = Field(default=100, validation_alias="LEADERBOARD_MAX_LIMIT")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
