"""
Broker volume statistics for Kubernetes

Reports how full each broker's persistent volume is by correlating broker
pods with the kubelet stats summary of the node they run on.

Components:
- PodLocator: lists candidate broker pods
- NodeStatsCorrelator: fetches a node's stats summary and finds one claim's volume
- VolumeStatsReader: ties both together and absorbs per-pod failures
"""

from volume_stats.errors import (
    VolumeStatsError,
    ConfigError,
    QueryError,
    CandidateError,
    MissingLabelError,
    InvalidFormatError,
    NoClaimVolumeError,
    ProxyError,
    NotFoundError,
)
from volume_stats.models import VolumeStatsResult, VolumeStatsReport, SkippedCandidate
from volume_stats.reader import VolumeStatsReader

__all__ = [
    'VolumeStatsReader',
    'VolumeStatsResult',
    'VolumeStatsReport',
    'SkippedCandidate',
    'VolumeStatsError',
    'ConfigError',
    'QueryError',
    'CandidateError',
    'MissingLabelError',
    'InvalidFormatError',
    'NoClaimVolumeError',
    'ProxyError',
    'NotFoundError',
]
__version__ = '1.0.0'
