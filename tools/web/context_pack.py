"""Assemble scraped pages into the context block and the final prompt."""

from collections.abc import Iterable

from .contracts import ScrapeResult

CONTEXT_SEPARATOR = "\n\n"


def aggregate_context(results: Iterable[ScrapeResult]) -> str:
    """
    Join successful scrapes with a blank line, keeping URL order.

    Failed or empty scrapes are dropped so no stray separators appear.
    """
    return CONTEXT_SEPARATOR.join(r.markdown for r in results if r.markdown)


def build_final_prompt(prompt: str, context: str) -> str:
    """
    Prepend the scraped context to the user's question.

    Args:
        prompt: Original user prompt
        context: Aggregated scrape context (may be empty)

    Returns:
        "Context:\\n<context>\\n\\nQuestion:\\n<prompt>" when context is non-empty,
        otherwise the prompt unchanged
    """
    if not context:
        return prompt
    return f"Context:\n{context}\n\nQuestion:\n{prompt}"
