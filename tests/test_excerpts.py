from quarry.search.excerpts import extract_excerpts


def test_two_occurrences_yield_two_windows_in_order() -> None:
    content = "the quick brown fox jumps over the quick dog"

    excerpts = extract_excerpts(content, "quick", "https://example.com/fox")

    assert [e.text for e in excerpts] == [
        "the quick brown fox jumps ove",
        " fox jumps over the quick dog",
    ]
    assert all(e.source == "https://example.com/fox" for e in excerpts)


def test_matching_is_case_insensitive() -> None:
    excerpts = extract_excerpts("Hello world, HELLO again", "hello", "src")

    assert len(excerpts) == 2
    assert excerpts[0].text.startswith("Hello")


def test_no_occurrence_returns_empty_list() -> None:
    assert extract_excerpts("nothing to see here", "absent", "src") == []


def test_empty_query_or_content_returns_empty_list() -> None:
    assert extract_excerpts("some text", "", "src") == []
    assert extract_excerpts("some text", "   ", "src") == []
    assert extract_excerpts("", "text", "src") == []


def test_windows_use_character_offsets_for_multibyte_text() -> None:
    content = "Ä" * 30 + "needle" + "Ö" * 30

    excerpts = extract_excerpts(content, "NEEDLE", "src")

    assert len(excerpts) == 1
    assert excerpts[0].text == "Ä" * 20 + "needle" + "Ö" * 20


def test_matches_do_not_overlap() -> None:
    excerpts = extract_excerpts("aaaa", "aa", "src", margin=0)

    assert [e.text for e in excerpts] == ["aa", "aa"]


def test_regex_metacharacters_are_matched_literally() -> None:
    excerpts = extract_excerpts("price is $5.00 (net)", "$5.00 (net)", "src", margin=3)

    assert [e.text for e in excerpts] == ["is $5.00 (net)"]
