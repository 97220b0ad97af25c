from tools.web.context_pack import aggregate_context, build_final_prompt
from tools.web.contracts import ScrapeResult


def test_empty_results_are_dropped_without_stray_separator():
    results = [
        ScrapeResult(url="https://a.test", markdown="content-A"),
        ScrapeResult(url="https://b.test", markdown="", error="boom"),
    ]
    assert aggregate_context(results) == "content-A"


def test_results_joined_with_blank_line_in_url_order():
    results = [
        ScrapeResult(url="https://b.test", markdown="B"),
        ScrapeResult(url="https://x.test", markdown=""),
        ScrapeResult(url="https://a.test", markdown="A"),
    ]
    assert aggregate_context(results) == "B\n\nA"


def test_no_results_gives_empty_context():
    assert aggregate_context([]) == ""


def test_final_prompt_with_context():
    assert build_final_prompt("Q", "X") == "Context:\nX\n\nQuestion:\nQ"


def test_final_prompt_without_context_is_prompt_verbatim():
    assert build_final_prompt("Q", "") == "Q"


def test_final_prompt_is_deterministic():
    assert build_final_prompt("Q", "X") == build_final_prompt("Q", "X")
