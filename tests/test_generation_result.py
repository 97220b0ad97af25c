from models.generation import GenerationResult


def test_from_dict_fills_missing_timestamp_in_utc_z_form():
    result = GenerationResult.from_dict({"text": "hi", "model": "m"})
    assert result.timestamp.endswith("Z")
    assert "+00:00" not in result.timestamp


def test_from_dict_restores_recorded_output():
    recorded = GenerationResult.from_dict(
        {
            "text": "answer",
            "model": "claude-3-haiku-20240307",
            "latency_ms": 12,
            "token_usage": {"prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 10},
            "finish_reason": "stop",
            "timestamp": "2026-01-01T00:00:00Z",
        }
    )
    assert recorded.token_usage.total_tokens == 10
    assert recorded.finish_reason == "stop"
    assert recorded.timestamp == "2026-01-01T00:00:00Z"
