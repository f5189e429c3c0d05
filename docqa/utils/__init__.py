"""docqa utilities.

  - validators: Input validation
  - formatters: Output formatting
  - logger: Logging configuration
"""

from docqa.utils.validators import (
    validate_chunks,
    validate_file_path,
    validate_question,
    validate_similarity_threshold,
    validate_top_k,
)
from docqa.utils.formatters import (
    format_ask_result,
    format_ingest_result,
    format_stats,
)
from docqa.utils.logger import configure_logging, get_logger, setup_logger

__all__ = [
    # Validators
    "validate_chunks",
    "validate_file_path",
    "validate_question",
    "validate_similarity_threshold",
    "validate_top_k",
    # Formatters
    "format_ask_result",
    "format_ingest_result",
    "format_stats",
    # Logger
    "configure_logging",
    "get_logger",
    "setup_logger",
]
