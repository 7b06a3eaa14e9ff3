"""Service layer implementations."""

from douyin_api.services.aggregator import QualityAggregator
from douyin_api.services.cache import CacheError, CacheStore, SweepResult, sweep_scheduler
from douyin_api.services.resolver import Resolver, build_result_data
from douyin_api.services.statistics import StatisticsFetcher

__all__ = [
    # Cache
    "CacheError",
    "CacheStore",
    "SweepResult",
    "sweep_scheduler",
    # Resolution
    "QualityAggregator",
    "Resolver",
    "StatisticsFetcher",
    "build_result_data",
]
