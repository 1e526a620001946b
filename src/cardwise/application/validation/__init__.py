# Application Validation Package
from .cascade import ValidationCascade
from .tiers import EmbeddingTier, ExactTier, GenerativeTier, OfflineJudge

__all__ = ["ValidationCascade", "ExactTier", "EmbeddingTier", "GenerativeTier", "OfflineJudge"]
