"""Probability trees over the true draws of each shuffle.

Every government of a shuffle branches into the three draws its president may
really have seen, top-decks pass straight through. Paths that would need an
impossible set of fascists are cut, the survivors are weighted by how many deck
orderings produce them.
"""

import dataclasses

from tqdm import tqdm

from shitler_game.elections import ElectedGovernment, TopDeck
from shitler_game.information import AtLeastOneFascist

from .deck import FilterResult, complex_card_counter


@dataclasses.dataclass
class TreeNode:
    """One hypothesised election result.

    Attributes:
        election_result: The logged result with the president claim replaced
            by the hypothesised true draw
        original_claimed_blues: What the president actually claimed
        relative_probability: Chance of this node given its parent
        absolute_probability: Chance of the whole path down to this node
        children: Hypotheses for the next result of the shuffle
    """

    election_result: object
    original_claimed_blues: int
    relative_probability: FilterResult = FilterResult.none(1)
    absolute_probability: float = 0.0
    children: list = dataclasses.field(default_factory=list)

    def pres_guaranteed_fasc(self):
        """The president lied if this hypothesis is true."""
        if isinstance(self.election_result, TopDeck):
            return False
        return self.election_result.president_claimed_blues != self.original_claimed_blues

    def guaranteed_fasc_chancellor(self):
        """The chancellor lied if this hypothesis is true."""
        if isinstance(self.election_result, TopDeck):
            return False
        er = self.election_result
        return abs(er.president_claimed_blues - er.chancellor_claimed_blues) > 1

    def leaves(self):
        if not self.children:
            return [self]
        return [leaf for child in self.children for leaf in child.leaves()]

    @staticmethod
    def probability_conserved(nodes):
        """Sibling matches add up to their shared denominator, all the way down."""
        matching = sum(n.relative_probability.num_matching for n in nodes)
        checked = max((n.relative_probability.num_checked for n in nodes), default=0)
        return matching == checked and all(TreeNode.probability_conserved(n.children) for n in nodes)


@dataclasses.dataclass
class ShuffleTree:
    shuffle: object
    roots: list

    def leaves(self):
        return [leaf for root in self.roots for leaf in root.leaves()]


def generate_tree(election_results):
    """Full hypothesis tree for a sequence of election results."""
    if not election_results:
        return []
    er, rest = election_results[0], election_results[1:]

    if isinstance(er, TopDeck):
        return [TreeNode(er, er.passed_blues(), children=generate_tree(rest))]

    nodes = []
    # The draw held the enacted policy, so at least passed_blues liberals
    for blues in range(er.passed_blues(), er.passed_blues() + 3):
        hypothesis = dataclasses.replace(er, president_claimed_blues=blues)
        nodes.append(TreeNode(hypothesis, er.president_claimed_blues, children=generate_tree(rest)))
    return nodes


def path_facts(path):
    """AtLeastOneFascist facts implied by assuming every node of ``path`` is true."""
    facts = []
    for node in path:
        er = node.election_result
        if not isinstance(er, ElectedGovernment):
            continue
        if node.pres_guaranteed_fasc():
            facts.append(AtLeastOneFascist((er.president,)))
        if node.guaranteed_fasc_chancellor():
            facts.append(AtLeastOneFascist((er.chancellor,)))
    return facts


def filter_paths(nodes, predicate, path=()):
    """Keep the root-to-leaf paths accepted by ``predicate``, pruning emptied nodes."""
    kept = []
    for node in nodes:
        node_path = path + (node,)
        if not node.children:
            if predicate(node_path):
                kept.append(node)
            continue
        node.children = filter_paths(node.children, predicate, node_path)
        if node.children:
            kept.append(node)
    return kept


def fold_children_legal_draws(legal_sets):
    """Per depth union of the liberal counts sibling subtrees still need.

    A depth left unrestricted (None) by any sibling stays unrestricted.
    """
    if not legal_sets:
        return None
    folded = list(legal_sets[0])
    for other in legal_sets[1:]:
        folded = [
            None if left is None or right is None else left | right
            for left, right in zip(folded, other)
        ]
    return folded


class _ShuffleCounter:
    """Card counting for one shuffle, with the seat knowledge it depends on."""

    def __init__(self, session, shuffle):
        self.session = session
        self.shuffle = shuffle
        self.hard_confirmed_libs = frozenset(session.confirmed_liberals())
        self._path_libs = {}

    def path_liberals(self, path):
        facts = path_facts(path)
        key = frozenset(facts)
        if key not in self._path_libs:
            self._path_libs[key] = frozenset(self.session.confirmed_liberals(facts))
        return self._path_libs[key]

    def count(self, path, legal_sets, path_libs, node):
        return complex_card_counter(
            self.shuffle.initial_deck_liberal,
            self.shuffle.initial_deck_fascist,
            self.shuffle.election_results,
            [n.election_result for n in path],
            legal_sets,
            self.hard_confirmed_libs,
            path_libs,
            node.election_result,
        )


def _annotate_relative(counter, node, path, depth):
    """Weight the subtree of ``node``, returning (node, legal sets) or None if it vanished."""
    path_libs = counter.path_liberals(path)
    seen = frozenset([node.election_result.seen_blues()])

    if not node.children:
        legal_sets = [None] * (depth + 1)
        node.relative_probability = counter.count(path, legal_sets, path_libs, node)
        if node.relative_probability.num_matching == 0:
            return None
        legal_sets[depth] = seen
        return node, legal_sets

    node_path = path + (node,)
    annotated = []
    for child in node.children:
        result = _annotate_relative(counter, child, node_path, depth + 1)
        if result is not None:
            annotated.append(result)
    if not annotated:
        return None

    legal_sets = fold_children_legal_draws([legal for _, legal in annotated])
    children = []
    for child, _ in annotated:
        child.relative_probability = counter.count(node_path, legal_sets, path_libs, child)
        if child.relative_probability.num_matching > 0:
            children.append(child)
    node.children = children
    if not children:
        return None

    legal_sets[depth] = seen
    return node, legal_sets


def annotate_relative(roots, counter):
    annotated = [r for r in (_annotate_relative(counter, root, (), 0) for root in roots) if r is not None]
    if not annotated:
        return []

    legal_sets = fold_children_legal_draws([legal for _, legal in annotated])
    kept = []
    for root, _ in annotated:
        root.relative_probability = counter.count((), legal_sets, frozenset(), root)
        if root.relative_probability.num_matching > 0:
            kept.append(root)
    return kept


def annotate_absolute(nodes, parent_probability=1.0):
    for node in nodes:
        node.absolute_probability = parent_probability * node.relative_probability.probability()
        annotate_absolute(node.children, node.absolute_probability)
    return nodes


def build_probability_forest(session, verbose=False):
    """One weighted hypothesis tree per shuffle of the session's history.

    Args:
        session: Session providing the history, the facts and seat filtering
        verbose: Print progress

    Returns:
        List of ShuffleTree
    """
    forest = []
    shuffles = session.history.shuffle_analyses()
    for shuffle in tqdm(shuffles, desc="Shuffles", disable=not verbose, ncols=80):
        roots = generate_tree(list(shuffle.election_results))
        roots = filter_paths(roots, lambda path: session.is_consistent(path_facts(path)))
        roots = annotate_relative(roots, _ShuffleCounter(session, shuffle))
        assert TreeNode.probability_conserved(roots)
        annotate_absolute(roots)

        tree = ShuffleTree(shuffle, roots)
        if verbose:
            print(f"Shuffle #{shuffle.shuffle_index + 1}: {len(tree.leaves())} surviving paths")
        forest.append(tree)
    return forest
