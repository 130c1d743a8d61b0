import pytest

from convergraph.alphabet import GapPolicy
from convergraph.site_analyzer import SiteFrequencyAnalyzer
from convergraph.substitutions import Substitution, SubstitutionExtractor, substitution_table


def extract(alignment, gap_policy=GapPolicy.INCLUDE, threshold=0.97):
    frequencies = SiteFrequencyAnalyzer(threshold).analyze(alignment)
    return SubstitutionExtractor(frequencies, gap_policy).extract(alignment)


def test_label_uses_one_based_position():
    sub = Substitution(1, "C", "Y")
    assert sub.label == "C2Y"
    assert str(sub) == "C2Y"
    assert sub.position == 2


def test_substitutions_are_ordered_by_site_then_symbols():
    subs = [Substitution(2, "A", "T"), Substitution(0, "C", "Y"), Substitution(0, "C", "F")]
    assert sorted(subs) == [Substitution(0, "C", "F"), Substitution(0, "C", "Y"),
                            Substitution(2, "A", "T")]


def test_scenario_singleton_sets(make_alignment):
    sets = extract(make_alignment("ACDE", ["ACDE", "AYDE", "AYDE", "AYDE"]))
    assert sets[0] == frozenset()
    assert all(s == {Substitution(1, "C", "Y")} for s in sets[1:])


def test_conserved_site_ignored_even_when_differing_from_reference(make_alignment):
    sets = extract(make_alignment("AC", ["AY", "AY", "AY", "AY"]))
    assert all(s == frozenset() for s in sets)


def test_only_variable_sites_contribute(clustered):
    sets = extract(clustered)
    assert sets[4] == {
        Substitution(2, "T", "S"),
        Substitution(4, "Y", "F"),
        Substitution(6, "A", "V"),
        Substitution(8, "Q", "H"),
    }


class TestGapPolicy:

    QUERIES = ["A-DE", "A-DE", "AYDE", "AXDE"]

    def test_include_treats_gaps_as_symbols(self, make_alignment):
        sets = extract(make_alignment("ACDE", self.QUERIES), GapPolicy.INCLUDE)
        assert sets[0] == {Substitution(1, "C", "-")}
        assert sets[3] == {Substitution(1, "C", "X")}

    def test_skip_treats_gaps_as_missing_data(self, make_alignment):
        sets = extract(make_alignment("ACDE", self.QUERIES), "skip")
        assert sets[0] == frozenset()
        assert sets[2] == {Substitution(1, "C", "Y")}
        assert sets[3] == frozenset()

    def test_skip_ignores_reference_gaps(self, make_alignment):
        sets = extract(make_alignment("A-DE", ["AYDE", "AFDE", "A-DE"]), "skip")
        assert all(s == frozenset() for s in sets)

    def test_collapse_merges_gap_and_unknown(self, make_alignment):
        sets = extract(make_alignment("ACDE", self.QUERIES), GapPolicy.COLLAPSE)
        assert sets[0] == {Substitution(1, "C", "-")}
        assert sets[3] == {Substitution(1, "C", "-")}

    def test_collapse_unknown_against_reference_gap(self, make_alignment):
        sets = extract(make_alignment("A-DE", ["AXDE", "AYDE", "A?DE"]), "collapse")
        assert sets[0] == frozenset()
        assert sets[1] == {Substitution(1, "-", "Y")}
        assert sets[2] == frozenset()

    def test_unknown_policy_rejected(self, make_alignment):
        alignment = make_alignment("ACDE", self.QUERIES)
        frequencies = SiteFrequencyAnalyzer().analyze(alignment)
        with pytest.raises(ValueError):
            SubstitutionExtractor(frequencies, "ignore")


def test_substitution_table(make_alignment):
    alignment = make_alignment("AA", ["TT", "AA"])
    table = substitution_table(alignment, extract(alignment))
    assert list(table['label']) == ["A1T", "A2T"]
    assert set(table['query']) == {"query_1"}
