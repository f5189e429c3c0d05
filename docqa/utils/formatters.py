"""Output formatting utilities for docqa.

Renders answers, ingestion results and statistics as Markdown,
plain text or JSON.
"""

import json
from typing import Any, Dict

from docqa.models import AskResult, IngestResult


def format_ask_result(result: AskResult, format: str = "markdown") -> str:
    """Format an answer with its sources.

    Args:
        result: Answer to render
        format: Output format (markdown, plain, json)

    Returns:
        str: Formatted answer
    """
    if format == "json":
        return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)

    sources = ", ".join(f"#{s.id} ({s.score:.3f})" for s in result.sources)

    if format == "plain":
        lines = [result.answer]
        if sources:
            lines.append(f"Sources: {sources}")
        return "\n".join(lines)

    lines = [result.answer]
    if result.sources:
        lines.append("")
        lines.append("**Sources:**")
        for source in result.sources:
            lines.append(f"- Chunk #{source.id}: score {source.score:.3f}")
    return "\n".join(lines)


def format_ingest_result(result: IngestResult, format: str = "markdown") -> str:
    """Format the outcome of an ingestion."""
    if format == "json":
        return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)

    if format == "plain":
        return (
            f"Indexed {result.chunks} chunks "
            f"(total {result.total_vectors}) in {result.elapsed_ms} ms"
        )

    return "\n".join([
        "## 📥 Document indexed",
        "",
        f"- **Chunks:** {result.chunks}",
        f"- **Total vectors:** {result.total_vectors}",
        f"- **Time:** {result.elapsed_ms} ms",
    ])


def format_stats(stats: Dict[str, Any], format: str = "markdown") -> str:
    """Format index statistics.

    Args:
        stats: Dictionary from RAGManager.get_stats()
        format: Output format

    Returns:
        str: Formatted statistics
    """
    if format == "json":
        return json.dumps(stats, ensure_ascii=False, indent=2)

    if format == "plain":
        return "\n".join([
            "📊 docqa statistics:",
            f"Chunks: {stats.get('total_chunks', 0)}",
            f"Embedding model: {stats.get('embedding_model', '')}",
            f"Embedding dimension: {stats.get('embedding_dimension', 0)}",
            f"Top K: {stats.get('top_k', 0)}",
            f"Similarity threshold: {stats.get('similarity_threshold', 0)}",
        ])

    return "\n".join([
        "# 📊 docqa statistics",
        "",
        f"- **Chunks:** {stats.get('total_chunks', 0)}",
        f"- **Embedding model:** {stats.get('embedding_model', '')}",
        f"- **Embedding dimension:** {stats.get('embedding_dimension', 0)}",
        f"- **Top K:** {stats.get('top_k', 0)}",
        f"- **Similarity threshold:** {stats.get('similarity_threshold', 0)}",
    ])
