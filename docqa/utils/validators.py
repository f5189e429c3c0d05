"""Input validation utilities for docqa.

All functions return the validated value or raise ValidationError
with a readable message.
"""

from pathlib import Path
from typing import List, Sequence, Union

from docqa.exceptions import ValidationError

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB


def validate_file_path(file_path: Union[str, Path]) -> Path:
    """Validate a document path.

    Args:
        file_path: Path to the document

    Returns:
        Path: Validated path

    Raises:
        ValidationError: If the file is missing, empty or too large
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise ValidationError(f"File not found: {file_path}", field_name="file_path")

    if not file_path.is_file():
        raise ValidationError(f"Path is not a file: {file_path}", field_name="file_path")

    size = file_path.stat().st_size
    if size > MAX_FILE_SIZE:
        raise ValidationError(
            f"File too large: {size / 1024 / 1024:.1f}MB > {MAX_FILE_SIZE / 1024 / 1024}MB",
            field_name="file_path",
        )

    if size == 0:
        raise ValidationError("File is empty", field_name="file_path")

    return file_path


def validate_question(question: str, max_length: int = 2000) -> str:
    """Validate a user question.

    Args:
        question: Question text
        max_length: Maximum length in characters

    Returns:
        str: Stripped question

    Raises:
        ValidationError: If the question is blank or too long
    """
    if not question or not isinstance(question, str):
        raise ValidationError("Question must be a non-empty string", field_name="question")

    question = question.strip()

    if not question:
        raise ValidationError("Question cannot be empty or whitespace", field_name="question")

    if len(question) > max_length:
        raise ValidationError(
            f"Question too long: {len(question)} > {max_length} characters",
            field_name="question",
        )

    return question


def validate_chunks(chunks: Sequence[str]) -> List[str]:
    """Validate chunk strings produced by a splitter.

    Raises:
        ValidationError: If the list is empty or contains blank/non-string items
    """
    if not chunks:
        raise ValidationError("No chunks to ingest", field_name="chunks")

    for position, chunk in enumerate(chunks):
        if not isinstance(chunk, str):
            raise ValidationError(
                f"Chunk {position} must be a string, got: {type(chunk)}",
                field_name="chunks",
            )
        if not chunk.strip():
            raise ValidationError(f"Chunk {position} is blank", field_name="chunks")

    return list(chunks)


def validate_top_k(top_k: int, min_value: int = 1, max_value: int = 100) -> int:
    """Validate the top_k parameter.

    Raises:
        ValidationError: If the value is not an integer in range
    """
    if not isinstance(top_k, int) or isinstance(top_k, bool):
        try:
            top_k = int(top_k)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"top_k must be an integer: {e}", field_name="top_k") from e

    if top_k < min_value:
        raise ValidationError(f"top_k too small: {top_k} < {min_value}", field_name="top_k")

    if top_k > max_value:
        raise ValidationError(f"top_k too large: {top_k} > {max_value}", field_name="top_k")

    return top_k


def validate_similarity_threshold(
    threshold: float,
    min_value: float = 0.0,
    max_value: float = 1.0,
) -> float:
    """Validate a similarity threshold.

    Raises:
        ValidationError: If the value is not a number in range
    """
    try:
        threshold = float(threshold)
    except (ValueError, TypeError) as e:
        raise ValidationError(
            f"similarity_threshold must be a number: {e}", field_name="similarity_threshold"
        ) from e

    if threshold < min_value:
        raise ValidationError(
            f"similarity_threshold too small: {threshold} < {min_value}",
            field_name="similarity_threshold",
        )

    if threshold > max_value:
        raise ValidationError(
            f"similarity_threshold too large: {threshold} > {max_value}",
            field_name="similarity_threshold",
        )

    return threshold
