from datetime import datetime

from models.generation import TokenUsage


class TokenTracker:
    """
    Running token totals for a CLI session.
    Counts one request per generation that reported usage.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.prompt_tokens = 0
        self.completion_tokens = 0
        self.total_tokens = 0
        self.requests = 0

    def update(self, usage: TokenUsage | None) -> None:
        """Add one generation's usage to the totals (ignored when None)."""
        if usage is None:
            return
        self.requests += 1
        self.prompt_tokens += usage.prompt_tokens
        self.completion_tokens += usage.completion_tokens
        self.total_tokens += usage.total_tokens

    def get_summary(self) -> dict:
        return {
            "requests": self.requests,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "timestamp": datetime.now().isoformat(),
        }

    def format_summary(self) -> str:
        stats = self.get_summary()
        return (
            f"Requests: {stats['requests']}\n"
            f"Prompt tokens: {stats['prompt_tokens']}\n"
            f"Completion tokens: {stats['completion_tokens']}\n"
            f"Total tokens: {stats['total_tokens']}"
        )
