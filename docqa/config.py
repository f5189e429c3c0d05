"""Configuration module for docqa.

Manages environment variables and validation using Pydantic.
API keys for the embedding and chat providers are loaded from the .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration from environment variables.

    Attributes:
        HUGGINGFACE_API_KEY: Bearer token for the Hugging Face inference API
        EMBEDDING_MODEL: Embedding model identifier
        EMBEDDING_BASE_URL: Base URL the model name is appended to
        EMBEDDING_BATCH_SIZE: Texts per embedding request
        EMBEDDING_MAX_RETRIES: Attempts per embedding sub-batch
        EMBEDDING_RETRY_DELAY_MS: Base delay for linear backoff
        EMBEDDING_TIMEOUT: HTTP timeout for one embedding call (seconds)
        OPENAI_API_KEY: Key for the OpenAI-compatible chat endpoint
        OPENAI_BASE_URL: Chat endpoint base URL (OpenRouter by default)
        CHAT_MODEL: Chat model name
        CHAT_TEMPERATURE: Sampling temperature
        CHAT_MAX_TOKENS: Completion token cap
        CHAT_TIMEOUT: HTTP timeout for one chat call (seconds)
        TOP_K: Number of chunks passed to the chat model
        SIMILARITY_THRESHOLD: Minimum score for an answerable question
        OVERSAMPLE_FACTOR: Candidate pool multiplier before reranking
        CHUNK_SIZE: Words per chunk for the default chunker
        CHUNK_OVERLAP: Overlapping words between neighbouring chunks
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        >>> settings = get_settings()
        >>> print(settings.TOP_K)
    """

    HUGGINGFACE_API_KEY: str = ""
    EMBEDDING_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
    EMBEDDING_BASE_URL: str = "https://router.huggingface.co/hf-inference/models"
    EMBEDDING_BATCH_SIZE: int = 10
    EMBEDDING_MAX_RETRIES: int = 3
    EMBEDDING_RETRY_DELAY_MS: int = 1000
    EMBEDDING_TIMEOUT: float = 60.0

    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://openrouter.ai/api/v1"
    CHAT_MODEL: str = "meta-llama/llama-3.1-70b-instruct"
    CHAT_TEMPERATURE: float = 0.7
    CHAT_MAX_TOKENS: int = 1000
    CHAT_TIMEOUT: float = 120.0

    TOP_K: int = 4
    SIMILARITY_THRESHOLD: float = 0.35
    OVERSAMPLE_FACTOR: int = 3

    CHUNK_SIZE: int = 200
    CHUNK_OVERLAP: int = 40

    LOG_LEVEL: str = "INFO"

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def validate_retrieval_config(self) -> bool:
        """Validate retrieval and batching values.

        Returns:
            bool: True if configuration is valid

        Raises:
            ValueError: If a value is out of range
        """
        if self.TOP_K <= 0:
            raise ValueError(f"TOP_K must be positive, got {self.TOP_K}")

        if not (0 <= self.SIMILARITY_THRESHOLD <= 1):
            raise ValueError(
                f"SIMILARITY_THRESHOLD must be in [0, 1], got {self.SIMILARITY_THRESHOLD}"
            )

        if self.OVERSAMPLE_FACTOR < 1:
            raise ValueError(
                f"OVERSAMPLE_FACTOR must be >= 1, got {self.OVERSAMPLE_FACTOR}"
            )

        if self.EMBEDDING_BATCH_SIZE <= 0:
            raise ValueError(
                f"EMBEDDING_BATCH_SIZE must be positive, got {self.EMBEDDING_BATCH_SIZE}"
            )

        if self.EMBEDDING_MAX_RETRIES <= 0:
            raise ValueError(
                f"EMBEDDING_MAX_RETRIES must be positive, got {self.EMBEDDING_MAX_RETRIES}"
            )

        if not 0 <= self.CHUNK_OVERLAP < self.CHUNK_SIZE:
            raise ValueError("CHUNK_OVERLAP must be between 0 and CHUNK_SIZE - 1")

        return True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses @lru_cache to ensure only one Settings object is created
    during application lifetime. Missing API keys are not an error here:
    they are reported by the provider clients at first use.

    Returns:
        Settings: Application configuration

    Raises:
        ValueError: If retrieval settings are out of range
    """
    settings = Settings()
    settings.validate_retrieval_config()
    return settings
