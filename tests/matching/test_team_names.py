import pytest

from matching.team_names import (
    DEFAULT_TEAM_ALIASES,
    NameNormalizer,
    TeamAliasTable,
    find_team_match,
    normalize_team_name,
)


def test_normalize_variant_to_canonical():
    assert normalize_team_name("Man Utd") == "Manchester United FC"
    assert normalize_team_name("  spurs ") == "Tottenham Hotspur FC"
    assert normalize_team_name("Arsenal FC") == "Arsenal FC"


def test_unknown_name_is_returned_stripped():
    assert normalize_team_name("  Some Local Club ") == "Some Local Club"


def test_exact_canonical_match_wins_over_fuzzy():
    candidates = ["Manchester City", "Man United", "Newcastle"]
    assert find_team_match("Manchester United FC", candidates) == "Man United"


@pytest.mark.parametrize(
    "canonical,variant",
    [(c, v) for c, variants in list(DEFAULT_TEAM_ALIASES.items())[:40] for v in variants],
)
def test_alias_match_regardless_of_case_and_whitespace(canonical, variant):
    assert find_team_match(f"  {canonical.upper()} ", ["Unrelated Town", f" {variant.lower()}  "]) == f" {variant.lower()}  "


def test_similarity_scores():
    sim = NameNormalizer.similarity
    assert sim("Arsenal", "arsenal") == 1.0
    assert sim("Bolton Wanderers", "Bolton") == 0.8
    assert sim("Wigan", "Wigen") == pytest.approx(0.8)
    assert sim("", "") == 1.0


def test_fuzzy_threshold_strict():
    n = NameNormalizer(TeamAliasTable({}))
    # 1 - 3/10 = 0.7 -> non basta (serve > 0.7)
    assert n.match("abcdefghij", ["abcdefgxyz"]) is None
    assert n.match("abcdefghij", ["abcdefghxy"]) == "abcdefghxy"


def test_fuzzy_tie_keeps_first_candidate():
    n = NameNormalizer(TeamAliasTable({}))
    assert n.match("Stockport", ["Stockport County", "Stockport Town"]) == "Stockport County"


def test_no_match_returns_none():
    assert find_team_match("Real Madrid CF", ["Bayern Munich", "Juventus"]) is None


def test_alias_table_is_read_only():
    table = TeamAliasTable({"Alpha FC": ["Alpha"]})
    assert table.canonical("ALPHA") == "Alpha FC"
    assert "alpha fc" in table
    assert table.variants("Alpha FC") == ("Alpha",)
    with pytest.raises(TypeError):
        table._reverse["beta"] = "Beta"  # type: ignore[index]


def test_injected_table():
    n = NameNormalizer(TeamAliasTable({"Bolton Wanderers FC": ["Bolton"]}))
    assert n.match("Bolton Wanderers FC", ["Wigan", "Bolton"]) == "Bolton"
