"""
推荐模块：概率模型 + 加权抽签 + 粘性置顶控制器
"""

from nextup.recommend.probability import InvalidArgumentError, compute_distribution
from nextup.recommend.selector import select_weighted
from nextup.recommend.service import PinConflictError, RecommendationService

__all__ = [
    "InvalidArgumentError",
    "PinConflictError",
    "RecommendationService",
    "compute_distribution",
    "select_weighted",
]
