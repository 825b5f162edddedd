"""Scoring primitives: consensus aggregation and momentum decay."""

from scoring.core.consensus import (
    MIN_WEIGHT,
    ConsensusPoint,
    WeightedValue,
    consensus_history,
    conviction_weight,
    normalize_consensus,
    weighted_consensus,
)
from scoring.core.errors import InvalidConvictionInput, ScoringError
from scoring.core.momentum import MomentumScorer, TimedConviction
