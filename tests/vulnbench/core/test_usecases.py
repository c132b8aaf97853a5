"""Tests for use cases, including the full extract -> evaluate -> report flow on fakes."""
import pytest

from vulnbench.core.domain.models import DetectorOutcome, EvaluationResult, FixingCommit, RepositoryInfo, Verdict
from vulnbench.core.services import (
    ClassificationEngine,
    DetectionNormalizer,
    DiffAnalyzer,
    EvaluationOrchestrator,
    GroundTruthBuilder,
    LexicalMaxTieBreak,
    OriginResolver,
)
from vulnbench.core.usecases.evaluate import EvaluateAIUseCase, EvaluateStaticUseCase
from vulnbench.core.usecases.extract import ExtractGroundTruthUseCase
from vulnbench.core.usecases.logs import LogsUseCase
from vulnbench.core.usecases.report import ReportUseCase

from fakes import (
    FakeAIDetector,
    FakeChangeRequests,
    FakeClassifier,
    FakeLogger,
    FakeStaticAnalyzer,
    FakeStore,
    FakeVcs,
    make_record,
)

REPO = RepositoryInfo(owner="acme", name="shop", url="https://github.com/acme/shop", path="/fake/repo")
SOURCE = "def login(name):\n    return db.execute('SELECT * FROM users WHERE name=' + name)\n"


def _history():
    return FakeVcs(
        commits=[
            FixingCommit(hash="fix1", message="Fix CWE-89 SQL injection in login", parent_hash="p1"),
            FixingCommit(hash="p1", message="tweak styles", parent_hash="abc123"),
        ],
        diffs={("p1", "fix1", "app/db.py"): "@@ -10,3 +10,4 @@\n ctx\n+escape(name)\n ctx\n ctx\n"},
        changed={("p1", "fix1"): ["app/db.py"]},
        blame={("p1", "app/db.py"): {11: "abc123"}},
        messages={"abc123": "add login query"},
        trees={"abc123": {"app/db.py": SOURCE}},
    )


def _extract(vcs, store, logger):
    builder = GroundTruthBuilder(
        vcs=vcs,
        classifier=FakeClassifier(),
        change_requests=FakeChangeRequests({"abc123": "42"}),
        diff_analyzer=DiffAnalyzer(vcs=vcs),
        origin_resolver=OriginResolver(vcs=vcs, strategy=LexicalMaxTieBreak(), logger=logger),
        store=store,
        logger=logger,
    )
    return ExtractGroundTruthUseCase(vcs=vcs, builder=builder, store=store, logger=logger)


def _evaluate_ai(vcs, store, logger, detector):
    orchestrator = EvaluationOrchestrator(
        vcs=vcs,
        ground_truth=store,
        normalizer=DetectionNormalizer(classifier=FakeClassifier(), logger=logger),
        logger=logger,
    )
    engine = ClassificationEngine(detector="ai", label="AI", store=store, logger=logger)
    return EvaluateAIUseCase(orchestrator=orchestrator, detector=detector, engine=engine)


def _ai_finds_sqli():
    return FakeAIDetector(default=DetectorOutcome.success(
        {"vulnerabilities": [{"cwe_id": "CWE-89", "line_numbers": [40, 45], "description": "concatenated SQL"}]}
    ))


def test_extract_records_repository_and_resets_table():
    vcs = _history()
    store = FakeStore()
    logger = FakeLogger()

    records = _extract(vcs, store, logger).execute(repository=REPO)

    assert [r.key for r in records] == [("42", "app/db.py", "CWE-89")]
    assert store.latest_repository_info() == REPO
    assert store.resets == 1
    assert logger.fields("extraction_finished")[0]["records"] == 1


def test_extract_limit_bounds_history():
    vcs = _history()
    logger = FakeLogger()

    records = _extract(vcs, FakeStore(), logger).execute(repository=REPO, limit=1)

    assert len(records) == 1
    assert logger.fields("extraction_started")[0]["commits"] == 1


def test_end_to_end_true_positive_for_original_commit():
    vcs = _history()
    store = FakeStore()
    logger = FakeLogger()
    _extract(vcs, store, logger).execute(repository=REPO)

    [verdict] = _evaluate_ai(vcs, store, logger, _ai_finds_sqli()).execute()

    assert verdict.result is EvaluationResult.TP
    assert verdict.original_commit_id == "abc123"
    assert verdict.detected_line_range == (40, 45)
    assert vcs.checkouts[0] == "abc123"


def test_reruns_are_deterministic():
    def run_once():
        vcs = _history()
        store = FakeStore()
        logger = FakeLogger()
        _extract(vcs, store, logger).execute(repository=REPO)
        _evaluate_ai(vcs, store, logger, _ai_finds_sqli()).execute()
        return store.list_ground_truth(), store.list_verdicts("ai")

    assert run_once() == run_once()


def test_evaluate_static_use_case_delegates_to_orchestrator():
    vcs = _history()
    store = FakeStore()
    logger = FakeLogger()
    _extract(vcs, store, logger).execute(repository=REPO)
    orchestrator = EvaluationOrchestrator(
        vcs=vcs,
        ground_truth=store,
        normalizer=DetectionNormalizer(classifier=FakeClassifier(), logger=logger),
        logger=logger,
    )
    engine = ClassificationEngine(detector="sonarqube", label="SonarQube", store=store, logger=logger)

    [verdict] = EvaluateStaticUseCase(orchestrator=orchestrator, provider=FakeStaticAnalyzer(), engine=engine).execute()

    assert verdict.result is EvaluationResult.FN
    assert store.list_verdicts("sonarqube") == [verdict]


def test_report_summarizes_per_detector_and_cwe():
    vcs = _history()
    store = FakeStore()
    logger = FakeLogger()
    _extract(vcs, store, logger).execute(repository=REPO)
    _evaluate_ai(vcs, store, logger, _ai_finds_sqli()).execute()

    report = ReportUseCase(ground_truth=store, verdicts=store).execute()

    assert report.ground_truth_total == 1
    assert report.ground_truth_by_cwe == {"CWE-89": 1}
    assert report.ground_truth_by_type == {"SQL injection": 1}
    ai, sonar = report.detectors
    assert ai.detector == "ai"
    assert ai.totals.TP == 1
    assert ai.by_cwe["CWE-89"].TP == 1
    assert ai.totals.precision == pytest.approx(1.0)
    assert sonar.totals.total == 0


class FakeLogStore:
    def read_log(self, phase, verbose):
        return [f"{phase}:{verbose}"]

    def summarize_all(self):
        return ["summary"]


def test_logs_use_case_routes_by_phase():
    uc = LogsUseCase(log_store=FakeLogStore())

    assert uc.execute("extract", True) == ["extract:True"]
    assert uc.execute(None, False) == ["summary"]


def test_report_ignores_verdicts_without_ground_truth():
    store = FakeStore()
    store.upsert_ground_truth(make_record())
    store.upsert_verdict("ai", _fn_verdict(make_record()))
    store.reset_ground_truth()

    report = ReportUseCase(ground_truth=store, verdicts=store).execute()

    assert report.ground_truth_total == 0
    assert report.detectors[0].totals.total == 0


def test_extract_drops_verdicts_of_vanished_records():
    vcs = _history()
    store = FakeStore()
    logger = FakeLogger()
    stale = make_record(vulnerability_id="gone")
    store.upsert_verdict("ai", _fn_verdict(stale))

    _extract(vcs, store, logger).execute(repository=REPO)

    assert store.list_verdicts("ai") == []
    assert logger.fields("extraction_finished")[0]["pruned_verdicts"] == 1


def _fn_verdict(record):
    return Verdict(
        vulnerability_id=record.vulnerability_id,
        file_path=record.file_path,
        cwe_id=record.cwe_id,
        fix_commit_id=record.fix_commit_id,
        original_commit_id=record.original_commit_id,
        vulnerability_type=record.vulnerability_type,
        result=EvaluationResult.FN,
        rationale="Missed vulnerability: CWE-89",
    )
