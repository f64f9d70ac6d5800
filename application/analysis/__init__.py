"""Match analysis: derived stats and badges."""
from .advanced_stats import compute_advanced_stats, lane_opponent, is_isolated_death
from .badges import BADGES, Badge, BadgeEvaluator, EarnedBadge, evaluate_badges
from .context import AnalysisContext

__all__ = [
    'compute_advanced_stats',
    'lane_opponent',
    'is_isolated_death',
    'BADGES',
    'Badge',
    'BadgeEvaluator',
    'EarnedBadge',
    'evaluate_badges',
    'AnalysisContext',
]
