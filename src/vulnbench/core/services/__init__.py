from __future__ import annotations

from .diff_analyzer import DiffAnalyzer
from .origin_resolver import (
    OriginResolver,
    TieBreakStrategy,
    LexicalMaxTieBreak,
    EarliestCommitTieBreak,
    LatestCommitTieBreak,
    build_tie_break,
)
from .ground_truth_builder import GroundTruthBuilder
from .detection_normalizer import DetectionNormalizer
from .classification_engine import ClassificationEngine
from .json_extractor import JsonExtractor
from .evaluation_orchestrator import EvaluationOrchestrator

__all__ = [
    "DiffAnalyzer",
    "OriginResolver",
    "TieBreakStrategy",
    "LexicalMaxTieBreak",
    "EarliestCommitTieBreak",
    "LatestCommitTieBreak",
    "build_tie_break",
    "GroundTruthBuilder",
    "DetectionNormalizer",
    "ClassificationEngine",
    "JsonExtractor",
    "EvaluationOrchestrator",
]
