import pytest

from convergraph.exceptions import InvalidParameterError
from convergraph.graph import CooccurrenceGraphBuilder
from convergraph.pruner import GraphPruner
from convergraph.site_analyzer import SiteFrequencyAnalyzer
from convergraph.substitutions import Substitution, SubstitutionExtractor


def build(alignment):
    frequencies = SiteFrequencyAnalyzer().analyze(alignment)
    sets = SubstitutionExtractor(frequencies).extract(alignment)
    return CooccurrenceGraphBuilder().build(sets)


def test_isolated_node_is_removed(make_alignment):
    graph = build(make_alignment("ACDE", ["ACDE", "AYDE", "AYDE", "AYDE"]))
    assert graph.number_of_nodes() == 1
    report = GraphPruner(1, 0.0).prune(graph)
    assert report.orphan_nodes == 1
    assert graph.number_of_nodes() == 0
    assert graph.is_frozen


@pytest.mark.parametrize("support, nodes, edges", [(4, 0, 0), (3, 0, 0), (2, 2, 1), (0, 2, 1)])
def test_two_site_scenario_support(make_alignment, support, nodes, edges):
    graph = build(make_alignment("AA", ["TT", "TT", "AA"]))
    GraphPruner(support, 0.1).prune(graph)
    assert graph.number_of_nodes() == nodes
    assert graph.number_of_edges() == edges


def test_default_thresholds_on_clustered(clustered):
    graph = build(clustered)
    report = GraphPruner().prune(graph)
    assert [n.label for n in graph.nodes()] == ["T3S", "A7V"]
    assert report.edges_below_support == 5
    assert report.edges_below_frequency == 0
    assert report.orphan_nodes == 2


def test_frequency_stage_runs_after_support(clustered):
    graph = build(clustered)
    report = GraphPruner(1, 0.25).prune(graph)
    assert report.edges_below_support == 0
    assert report.edges_below_frequency == 2
    assert report.orphan_nodes == 0
    assert report.remaining_edges == 4


def test_remaining_nodes_have_edges(clustered):
    graph = build(clustered)
    GraphPruner(3, 0.0).prune(graph)
    assert graph.number_of_nodes() == 4
    assert all(graph.degree(n) >= 1 for n in graph.nodes())


def test_pruning_is_monotonic(clustered):
    previous = None
    for support in range(0, 8):
        graph = build(clustered)
        GraphPruner(support, 0.0).prune(graph)
        current = (graph.number_of_nodes(), graph.number_of_edges())
        if previous is not None:
            assert current[0] <= previous[0] and current[1] <= previous[1]
        previous = current

    previous = None
    for frequency in [0.0, 0.1, 0.2, 0.3, 0.5, 0.6, 0.7, 1.0]:
        graph = build(clustered)
        GraphPruner(0, frequency).prune(graph)
        current = (graph.number_of_nodes(), graph.number_of_edges())
        if previous is not None:
            assert current[0] <= previous[0] and current[1] <= previous[1]
        previous = current


def test_empty_graph_is_valid(make_alignment):
    graph = build(make_alignment("ACDE", ["ACDE", "ACDE"]))
    report = GraphPruner().prune(graph)
    assert report.remaining_nodes == 0
    assert graph.nodes() == []


def test_edge_at_threshold_survives(make_alignment):
    graph = build(make_alignment("AA", ["TT", "TT", "AA", "AA"]))
    GraphPruner(2, 0.5).prune(graph)
    assert graph.has_edge(Substitution(0, "A", "T"), Substitution(1, "A", "T"))


@pytest.mark.parametrize("support, frequency", [(-1, 0.1), (4, -0.01), (4, 1.01), (2.5, 0.1)])
def test_invalid_parameters(support, frequency):
    with pytest.raises(InvalidParameterError):
        GraphPruner(support, frequency)
