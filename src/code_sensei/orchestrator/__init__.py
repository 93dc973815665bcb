"""Aggregation, classification and producer orchestration."""

from code_sensei.orchestrator.aggregator import (
    ReviewAggregator,
    aggregate,
    compute_score,
    deduplicate,
    sort_by_severity,
)
from code_sensei.orchestrator.classifier import (
    FIXABLE_RULES,
    classify,
    is_blocking,
    is_whitelisted,
)
from code_sensei.orchestrator.orchestrator import ProducerOrchestrator, ProducerResults
from code_sensei.orchestrator.policy import decide_conclusion, is_merge_eligible

__all__ = [
    "FIXABLE_RULES",
    "ProducerOrchestrator",
    "ProducerResults",
    "ReviewAggregator",
    "aggregate",
    "classify",
    "compute_score",
    "decide_conclusion",
    "deduplicate",
    "is_blocking",
    "is_merge_eligible",
    "is_whitelisted",
    "sort_by_severity",
]
