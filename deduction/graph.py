"""Plain graph descriptions of a session for an external renderer.

Nodes and edges carry attribute dicts using Graphviz attribute names (label,
color, fontcolor, dir, taillabel, headlabel, arrowhead), but nothing here
renders or serialises them.
"""

import dataclasses

from shitler_game.actions import Kill
from shitler_game.elections import ElectedGovernment, TopDeck
from shitler_game.information import (
    ConfirmedNotHitler,
    FascistInvestigation,
    HardFact,
    LiberalInvestigation,
    PolicyConflict,
)
from shitler_game.policy import Policy, claim_pattern_from_blues


@dataclasses.dataclass
class Graph:
    nodes: dict = dataclasses.field(default_factory=dict)
    edges: list = dataclasses.field(default_factory=list)

    def add_node(self, name, **attributes):
        self.nodes.setdefault(name, {}).update(attributes)

    def add_edge(self, tail, head, **attributes):
        self.edges.append((tail, head, attributes))

    def edges_between(self, tail, head):
        return [attrs for t, h, attrs in self.edges if (t, h) == (tail, head)]


def _policy_color(policy):
    return "blue" if policy == Policy.LIBERAL else "red"


def government_overview(session):
    """Seats as nodes, governments, kills and investigations as edges."""
    graph = Graph()
    for seat in session.config.players():
        graph.add_node(seat, label=session.format_name(seat))

    handled_conflicts = set()
    for index, result in enumerate(session.history.results):
        if not isinstance(result, ElectedGovernment):
            continue
        if result.conflict:
            handled_conflicts.add(frozenset((result.president, result.chancellor)))
        graph.add_edge(
            result.president,
            result.chancellor,
            label=str(index + 1),
            color=_policy_color(result.policy),
            dir="both" if result.conflict else "none",
            taillabel=claim_pattern_from_blues(result.president_claimed_blues, 3),
            headlabel=claim_pattern_from_blues(result.chancellor_claimed_blues, 2),
        )
        action = result.presidential_action
        if isinstance(action, Kill):
            graph.add_edge(result.president, action.player, label="killed", arrowhead="open")

    for info in session.collect_information():
        if isinstance(info, ConfirmedNotHitler):
            graph.add_node(
                info.player,
                label=f"{session.format_name(info.player)}\nConfirmed not Hitler.",
            )
        elif isinstance(info, HardFact):
            graph.add_node(info.player, color="red" if info.role.is_fascist() else "blue")
        elif isinstance(info, PolicyConflict):
            # Government conflicts already have their edge
            pair = frozenset((info.left, info.right))
            if pair not in handled_conflicts:
                handled_conflicts.add(pair)
                graph.add_edge(info.left, info.right, dir="both", color="red")
        elif isinstance(info, LiberalInvestigation):
            graph.add_edge(info.investigator, info.investigatee, color="blue")
        elif isinstance(info, FascistInvestigation):
            graph.add_edge(info.investigator, info.investigatee, color="red")
    return graph


def _tree_node_label(node, session):
    er = node.election_result
    if isinstance(er, TopDeck):
        return f"Top-Deck: {er.policy!s}"
    return (
        f"Assumed Draw: {claim_pattern_from_blues(er.president_claimed_blues, 3)}\n"
        f"President {session.format_name(er.president)}: "
        f"{claim_pattern_from_blues(node.original_claimed_blues, 3)}\n"
        f"Chancellor {session.format_name(er.chancellor)}: "
        f"{claim_pattern_from_blues(er.chancellor_claimed_blues, 2)}"
    )


def _add_tree_nodes(graph, parent_name, nodes, session):
    for cid, node in enumerate(nodes):
        name = f"{parent_name}_{cid}"
        graph.add_edge(parent_name, name, label=f"{node.relative_probability.probability() * 100:.1f}%")
        graph.add_node(
            name,
            label=f"{_tree_node_label(node, session)}\n{node.absolute_probability * 100:.1f}%",
            color="red" if node.pres_guaranteed_fasc() else "blue",
            fontcolor="red" if node.guaranteed_fasc_chancellor() else "black",
        )
        _add_tree_nodes(graph, name, node.children, session)


def probability_forest_graph(forest, session):
    """One root per shuffle with the weighted hypotheses hanging below it."""
    graph = Graph()
    for tree in forest:
        root_name = f"shuffle{tree.shuffle.shuffle_index}"
        graph.add_node(root_name, label=f"Shuffle #{tree.shuffle.shuffle_index + 1}")
        _add_tree_nodes(graph, root_name, tree.roots, session)
    return graph
