from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Provider keys; environment values always win over the encrypted key store
	claude_api_key: str | None = Field(default=None, validation_alias="CLAUDE_API_KEY")
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")

	claude_model: str = Field(default="claude-3-5-sonnet-20241022", validation_alias="CLAUDE_MODEL")
	openai_model: str = Field(default="gpt-4o", validation_alias="OPENAI_MODEL")
	gemini_model: str = Field(default="gemini-1.5-pro", validation_alias="GEMINI_MODEL")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	temperature: float = Field(default=0.7, validation_alias="AI_TEMPERATURE")
	max_output_tokens: int = Field(default=4096, validation_alias="AI_MAX_OUTPUT_TOKENS")
	# Hard upper bound for one vendor call, including connect and read
	request_timeout_seconds: float = Field(default=60.0, validation_alias="AI_REQUEST_TIMEOUT_SECONDS")

	# Encrypted key store
	encryption_key: str | None = Field(default=None, validation_alias="ENCRYPTION_KEY")
	credential_cache_seconds: int = Field(default=300, validation_alias="CREDENTIAL_CACHE_SECONDS")

	# Generation defaults
	default_content_length: int = Field(default=800, validation_alias="DEFAULT_CONTENT_LENGTH")
	# Upper bound for a requested passage length
	max_content_length: int = Field(default=10000, validation_alias="MAX_CONTENT_LENGTH")
	batch_concurrency: int = Field(default=1, validation_alias="BATCH_CONCURRENCY")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Seed admin
	seed_admin_email: str | None = Field(default=None, validation_alias="SEED_ADMIN_EMAIL")
	seed_admin_password: str | None = Field(default=None, validation_alias="SEED_ADMIN_PASSWORD")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	def env_api_keys(self) -> dict[str, str | None]:
		return {
			"claude": self.claude_api_key,
			"gemini": self.gemini_api_key,
			"openai": self.openai_api_key,
		}

settings = Settings()
