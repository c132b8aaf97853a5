"""Tests for domain helpers: OrderedSet, CWE handling, message patterns, models."""
import pytest

from vulnbench.core.domain.cwe import UNKNOWN_CWE, cwe_equals, normalize_cwe, parse_cwe_answer
from vulnbench.core.domain.models import EvaluationResult, GroundTruthRecord, VerdictCounts
from vulnbench.core.domain.ordered_set import OrderedSet
from vulnbench.core.domain.security_patterns import match_security_patterns


class TestOrderedSet:
    def test_keeps_first_insertion_position(self):
        s = OrderedSet([3, 1, 3, 2, 1])

        assert s.to_list() == [3, 1, 2]
        assert len(s) == 3

    def test_add_reports_novelty(self):
        s: OrderedSet[str] = OrderedSet()

        assert s.add("a") is True
        assert s.add("a") is False

    def test_equality_follows_insertion_order(self):
        assert OrderedSet([1, 2]) == OrderedSet([1, 2])
        assert OrderedSet([1, 2]) != OrderedSet([2, 1])

    def test_equals_plain_set_by_membership(self):
        assert OrderedSet([2, 1]) == {1, 2}
        assert OrderedSet([1]) != frozenset({1, 2})


class TestCwe:
    @pytest.mark.parametrize("value", ["CWE-79", "cwe-79", " 79 "])
    def test_normalize(self, value):
        assert normalize_cwe(value) == "79"

    def test_equals_requires_value(self):
        assert cwe_equals("CWE-89", "cwe-89")
        assert not cwe_equals("", "")
        assert not cwe_equals("CWE-89", "CWE-79")

    def test_parse_answer_accepts_only_a_single_id(self):
        assert parse_cwe_answer(' "cwe-22" ') == "CWE-22"
        assert parse_cwe_answer("UNKNOWN") is None
        assert parse_cwe_answer("Probably CWE-22 or CWE-23") is None
        assert parse_cwe_answer(None) is None
        assert UNKNOWN_CWE == "UNKNOWN"


class TestSecurityPatterns:
    def test_plain_message_is_not_security_related(self):
        m = match_security_patterns("refactor logging setup")

        assert m.security_related is False
        assert not m.cwe_ids

    def test_explicit_cwe_and_type_deduplicate(self):
        m = match_security_patterns("fix CWE-89 SQL injection in login")

        assert m.cwe_ids.to_list() == ["CWE-89"]
        assert m.vulnerability_types.to_list() == ["SQL injection"]
        assert m.security_related is True

    def test_keyword_without_cwe(self):
        m = match_security_patterns("hotfix for CVE-2021-12345")

        assert m.security_related is True
        assert not m.cwe_ids

    def test_cwe_order_follows_discovery(self):
        m = match_security_patterns("Fix XSS (CWE-79) and path traversal")

        assert m.cwe_ids.to_list() == ["CWE-79", "CWE-22"]
        assert m.vulnerability_types.to_list() == ["cross-site scripting", "path traversal"]

    def test_owasp_identifier_is_recorded(self):
        m = match_security_patterns("address OWASP A3 finding")

        assert m.security_related is True
        assert "OWASP A3" in m.cwe_ids


class TestModels:
    def test_record_requires_cwe(self):
        with pytest.raises(ValueError):
            GroundTruthRecord(
                vulnerability_id="1",
                file_path="a.py",
                cwe_id=" ",
                fix_commit_id="f",
                fix_message="",
                original_commit_id="o",
                original_message="",
            )

    def test_verdict_counts_metrics(self):
        c = VerdictCounts()
        for r in (EvaluationResult.TP, EvaluationResult.TP, EvaluationResult.FP, EvaluationResult.FN, EvaluationResult.SKIPPED):
            c.add(r)

        assert c.total == 5
        assert c.precision == pytest.approx(2 / 3)
        assert c.recall == pytest.approx(2 / 3)
        assert VerdictCounts().precision is None
