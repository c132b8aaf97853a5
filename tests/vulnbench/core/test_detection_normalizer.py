"""Tests for DetectionNormalizer and JsonExtractor."""
from vulnbench.core.domain.models import DetectionStatus, DetectorOutcome
from vulnbench.core.services import DetectionNormalizer, JsonExtractor
from vulnbench.core.services.detection_normalizer import strip_component_key

from fakes import FakeClassifier, FakeLogger


def _normalizer(inferred=None):
    classifier = FakeClassifier(inferred)
    return DetectionNormalizer(classifier=classifier, logger=FakeLogger()), classifier


class TestAIResponses:
    def test_findings_from_payload(self):
        normalizer, _ = _normalizer()
        outcome = DetectorOutcome.success({
            "vulnerabilities": [
                {"cwe_id": "CWE-89", "line_numbers": [40, 45], "description": "sqli"},
                {"cwe_id": None, "line_numbers": "7"},
                "not an object",
            ]
        })

        detection = normalizer.from_ai_response("app/db.py", outcome)

        assert detection.analyzable
        assert [(f.cwe_id, f.line_range) for f in detection.findings] == [
            ("CWE-89", (40, 45)),
            ("UNKNOWN", (7,)),
        ]

    def test_empty_list_is_analyzable(self):
        normalizer, _ = _normalizer()

        detection = normalizer.from_ai_response("a.py", DetectorOutcome.success({"vulnerabilities": []}))

        assert detection.analyzable
        assert detection.findings == ()

    def test_malformed_payload_is_error(self):
        normalizer, _ = _normalizer()

        detection = normalizer.from_ai_response("a.py", DetectorOutcome.success({"result": "ok"}))

        assert detection.status is DetectionStatus.ERROR
        assert "vulnerabilities" in detection.cause

    def test_failure_passes_through(self):
        normalizer, _ = _normalizer()

        detection = normalizer.from_ai_response(
            "a.py", DetectorOutcome.inconclusive("context length exceeded model limits")
        )

        assert detection.status is DetectionStatus.INCONCLUSIVE
        assert detection.cause == "context length exceeded model limits"


class TestStaticIssues:
    def test_groups_by_file_and_strips_project_key(self):
        normalizer, _ = _normalizer()
        issues = [
            {"component": "autogen_abc:app/db.py", "cwe": "89", "message": "SQL", "textRange": {"startLine": 40, "endLine": 45}},
            {"component": "autogen_abc:app/views.py", "cwe": ["CWE-79"], "message": "XSS", "line": 3},
            {"component": "autogen_abc:app/db.py", "cwe": "CWE-798", "message": "password"},
        ]

        grouped = normalizer.from_static_issues(issues)

        assert list(grouped) == ["app/db.py", "app/views.py"]
        assert [(f.cwe_id, f.line_range) for f in grouped["app/db.py"]] == [("CWE-89", (40, 45)), ("CWE-798", ())]
        assert grouped["app/views.py"][0].line_range == (3,)

    def test_missing_cwe_is_inferred_once_per_message(self):
        normalizer, classifier = _normalizer({"Make sure this query is safe": "CWE-89"})
        issues = [
            {"component": "p:a.py", "message": "Make sure this query is safe"},
            {"component": "p:b.py", "cwe": "UNKNOWN", "message": "Make sure this query is safe"},
            {"component": "p:c.py", "message": "something else"},
        ]

        grouped = normalizer.from_static_issues(issues)

        assert grouped["a.py"][0].cwe_id == "CWE-89"
        assert grouped["b.py"][0].cwe_id == "CWE-89"
        assert grouped["c.py"][0].cwe_id == "UNKNOWN"
        assert classifier.infer_calls == ["Make sure this query is safe", "something else"]

    def test_for_file_without_issues_is_empty_success(self):
        normalizer, _ = _normalizer()

        detection = normalizer.for_file({}, "a.py")

        assert detection.analyzable
        assert detection.findings == ()

    def test_strip_component_key(self):
        assert strip_component_key("proj:src/a.py") == "src/a.py"
        assert strip_component_key("src/a.py") == "src/a.py"


class TestJsonExtractor:
    def test_plain_object(self):
        assert JsonExtractor().extract('{"vulnerabilities": []}') == {"vulnerabilities": []}

    def test_markdown_fence(self):
        text = '```json\n{"vulnerabilities": [{"cwe_id": "CWE-79"}]}\n```'

        assert JsonExtractor().extract(text) == {"vulnerabilities": [{"cwe_id": "CWE-79"}]}

    def test_object_inside_prose(self):
        assert JsonExtractor().extract('Result: {"a": 1} done') == {"a": 1}

    def test_no_object(self):
        assert JsonExtractor().extract("no json here") is None
        assert JsonExtractor().extract("[1, 2]") is None
        assert JsonExtractor().extract("{invalid json}") is None
