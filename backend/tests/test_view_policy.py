from franchise_mapper.models.franchise_models import FranchiseNode, SortMode, ViewPolicy
from franchise_mapper.models.media_models import MediaTitle
from franchise_mapper.services.franchise.view_policy import apply_view_policy


def _node(node_id: int, year: int = 2000, format: str = "TV", english: str | None = None, romaji: str | None = None):
    return FranchiseNode(
        id=node_id,
        title=MediaTitle(english=english, romaji=romaji),
        format=format,
        year=year,
    )


def test_year_sort_breaks_ties_by_id():
    nodes = [_node(3, 2010), _node(1, 2010), _node(2, 2001)]
    assert [n.id for n in apply_view_policy(nodes)] == [2, 1, 3]


def test_missing_year_sorts_after_present_years():
    nodes = [_node(1, 9999), _node(2, 2024), _node(3, 1980)]
    assert [n.id for n in apply_view_policy(nodes)] == [3, 2, 1]


def test_title_sort_is_case_insensitive():
    nodes = [
        _node(1, english="banana"),
        _node(2, english="Apple"),
        _node(3, english="cherry"),
    ]
    ordered = apply_view_policy(nodes, ViewPolicy(sort=SortMode.TITLE))
    assert [n.id for n in ordered] == [2, 1, 3]


def test_title_sort_uses_best_available_title():
    nodes = [
        _node(1, english=None, romaji="Zoku"),
        _node(2, english="Alpha", romaji="Omega"),
    ]
    ordered = apply_view_policy(nodes, ViewPolicy(sort=SortMode.TITLE))
    assert [n.id for n in ordered] == [2, 1]


def test_title_sort_breaks_ties_by_exact_title_then_id():
    nodes = [_node(5, english="same"), _node(4, english="Same"), _node(3, english="same")]
    ordered = apply_view_policy(nodes, ViewPolicy(sort=SortMode.TITLE))
    assert [n.id for n in ordered] == [4, 3, 5]


def test_filters_formats_and_hidden_ids():
    nodes = [_node(1), _node(2, format="OVA"), _node(3, format="MOVIE"), _node(4)]
    policy = ViewPolicy(formats=["TV", "MOVIE"], hidden_ids=[4])
    assert [n.id for n in apply_view_policy(nodes, policy)] == [1, 3]


def test_does_not_mutate_input():
    nodes = [_node(2, 2010), _node(1, 2000)]
    apply_view_policy(nodes)
    assert [n.id for n in nodes] == [2, 1]
