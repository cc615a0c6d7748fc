"""Tests for the probability forest."""

from math import comb

import pytest

from deduction.deck import FilterResult
from deduction.session import Session
from deduction.tree import TreeNode, filter_paths, fold_children_legal_draws, generate_tree
from shitler_game.actions import ActionKind
from shitler_game.config import GameConfiguration
from shitler_game.elections import CardContext, ElectedGovernment, TopDeck
from shitler_game.policy import Policy


def _government(claim, policy):
    return ElectedGovernment(1, 2, claim, 1, False, policy, deck_context=CardContext(17))


def test_generate_tree_branches_on_true_draws():
    roots = generate_tree([_government(1, Policy.LIBERAL)])
    assert [r.election_result.president_claimed_blues for r in roots] == [1, 2, 3]
    assert all(r.original_claimed_blues == 1 for r in roots)
    assert [r.pres_guaranteed_fasc() for r in roots] == [False, True, True]

    roots = generate_tree([_government(0, Policy.FASCIST)])
    assert [r.election_result.president_claimed_blues for r in roots] == [0, 1, 2]


def test_top_decks_pass_through():
    roots = generate_tree([TopDeck(Policy.FASCIST, CardContext(17)), _government(1, Policy.LIBERAL)])
    assert len(roots) == 1
    assert not roots[0].pres_guaranteed_fasc()
    assert len(roots[0].children) == 3
    assert len(roots[0].leaves()) == 3


def test_filter_paths_prunes_empty_parents():
    roots = generate_tree([_government(1, Policy.LIBERAL), _government(1, Policy.LIBERAL)])
    kept = filter_paths(roots, lambda path: path[0].election_result.president_claimed_blues == 2)
    assert len(kept) == 1
    assert len(kept[0].children) == 3


def test_fold_children_legal_draws():
    folded = fold_children_legal_draws([[None, frozenset({1})], [None, frozenset({2})]])
    assert folded == [None, {1, 2}]
    assert fold_children_legal_draws([[frozenset({1})], [None]]) == [None]
    assert fold_children_legal_draws([]) is None


def test_probability_conserved():
    parent = TreeNode(_government(1, Policy.LIBERAL), 1, FilterResult(3, 4))
    sibling = TreeNode(_government(2, Policy.LIBERAL), 1, FilterResult(1, 4))
    assert TreeNode.probability_conserved([parent, sibling])
    assert not TreeNode.probability_conserved([parent])


def test_single_government_forest():
    session = Session(GameConfiguration.standard(5))
    session.add_government(1, 2, "rrb", "rb")
    forest = session.probability_forest()

    assert len(forest) == 1
    roots = forest[0].roots
    assert [r.election_result.president_claimed_blues for r in roots] == [1, 2, 3]

    with_a_liberal = comb(17, 6) - comb(14, 6)
    assert roots[0].relative_probability == FilterResult(3 * comb(14, 5), with_a_liberal)
    assert roots[1].relative_probability == FilterResult(3 * comb(14, 4), with_a_liberal)
    assert roots[2].relative_probability == FilterResult(comb(14, 3), with_a_liberal)
    assert roots[2].guaranteed_fasc_chancellor()
    assert TreeNode.probability_conserved(roots)
    assert sum(leaf.absolute_probability for leaf in forest[0].leaves()) == pytest.approx(1.0)


def test_confirmed_liberal_president_pins_the_draw():
    session = Session(GameConfiguration.standard(5))
    session.add_hard_fact(1, "liberal")
    session.add_government(1, 2, "rrb", "rb")
    roots = session.probability_forest()[0].roots

    assert len(roots) == 1
    assert roots[0].relative_probability == FilterResult(3 * comb(14, 5), 3 * comb(14, 5))
    assert roots[0].absolute_probability == pytest.approx(1.0)


def test_two_governments_conserve_probability():
    session = Session(GameConfiguration.standard(5))
    session.add_government(1, 2, "rrb", "rb")
    session.add_government(2, 3, "rrr", "rr")
    tree = session.probability_forest()[0]

    assert TreeNode.probability_conserved(tree.roots)
    assert sum(leaf.absolute_probability for leaf in tree.leaves()) == pytest.approx(1.0)


def test_probability_graph():
    session = Session(GameConfiguration.standard(5))
    session.add_government(1, 2, "rrb", "rb")
    graph = session.probability_graph()

    assert graph.nodes["shuffle0"]["label"] == "Shuffle #1"
    first = graph.nodes["shuffle0_0"]
    assert first["label"].startswith("Assumed Draw: RRB\nPresident 1: RRB\nChancellor 2: RB")
    assert first["color"] == "blue"
    assert graph.nodes["shuffle0_1"]["color"] == "red"


def test_forest_over_every_shuffle_of_a_finished_game():
    session = Session(GameConfiguration.standard(5))
    session.add_government(1, 2, "rrb", "rb")
    session.add_government(2, 3, "rrb", "rb")
    session.add_government(3, 4, "rrb", "rb")
    session.add_government(4, 5, "rrr", "rr")
    session.add_government(5, 1, "rrr", "rr")
    session.add_top_deck("f")
    session.add_government(4, 1, "rrr", "rr", target=5)
    session.add_government(1, 2, "rrb", "rb")
    session.add_government(2, 1, "rrr", "rr", target=4)
    session.add_government(3, 2, "rbb", "bb")
    assert session.history.game_over()

    forest = session.probability_forest()
    assert [len(tree.shuffle.election_results) for tree in forest] == [5, 4, 1]
    # The top-deck opens the second shuffle
    assert len(forest[1].roots) == 1
    for tree in forest:
        assert TreeNode.probability_conserved(tree.roots)
        assert sum(leaf.absolute_probability for leaf in tree.leaves()) == pytest.approx(1.0)

    graph = session.probability_graph()
    assert graph.nodes["shuffle2"]["label"] == "Shuffle #3"


def test_forest_with_a_burned_card():
    config = GameConfiguration(fascist_board_configuration=(ActionKind.PEEK_AND_BURN,) * 5)
    session = Session(config)
    session.add_government(1, 2, "rrr", "rr", claim="r", discarded=True)
    session.add_government(2, 3, "rrb", "rb")
    tree = session.probability_forest()[0]

    assert [root.election_result.burned_card() for root in tree.roots] == [True, True, True]
    assert TreeNode.probability_conserved(tree.roots)
    assert sum(leaf.absolute_probability for leaf in tree.leaves()) == pytest.approx(1.0)
