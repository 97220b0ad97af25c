from tools.web.urls import extract_urls


def test_extracts_urls_in_encounter_order():
    assert extract_urls("See https://a.test and https://b.test now") == [
        "https://a.test",
        "https://b.test",
    ]


def test_no_urls_returns_empty_list():
    assert extract_urls("What is the capital of France?") == []
    assert extract_urls("") == []


def test_http_and_https_both_match():
    assert extract_urls("old http://x.test/a new https://y.test/b") == [
        "http://x.test/a",
        "https://y.test/b",
    ]


def test_url_runs_to_next_whitespace():
    # Trailing punctuation is part of the non-whitespace run
    assert extract_urls("read https://a.test/path?q=1#frag, then stop") == [
        "https://a.test/path?q=1#frag,"
    ]


def test_duplicates_are_kept():
    assert extract_urls("https://a.test https://a.test") == ["https://a.test", "https://a.test"]


def test_other_schemes_are_ignored():
    assert extract_urls("ftp://files.test mailto:me@x.test www.example.com") == []


def test_url_across_newlines_is_split():
    assert extract_urls("https://a.test\nhttps://b.test\tdone") == ["https://a.test", "https://b.test"]
