"""
Data structures shared by the pod locator, the node stats correlator and the reader
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Any, Optional, Tuple

from volume_stats.errors import CandidateError


@dataclass(frozen=True)
class ClaimBinding:
    """A pod volume backed by a PersistentVolumeClaim"""

    volume_name: str
    claim_name: str


@dataclass(frozen=True)
class Candidate:
    """A pod matching the caller's namespace and label selector"""

    name: str
    namespace: str
    node_name: Optional[str]
    labels: Dict[str, str] = field(default_factory=dict)
    claims: Tuple[ClaimBinding, ...] = ()


@dataclass(frozen=True)
class PVCReference:
    namespace: str
    name: str


@dataclass(frozen=True)
class VolumeStats:
    """One volume entry of a kubelet stats summary"""

    name: str
    pvc_ref: Optional[PVCReference] = None
    capacity_bytes: Optional[int] = None
    available_bytes: Optional[int] = None
    used_bytes: Optional[int] = None


@dataclass(frozen=True)
class PodStats:
    namespace: str
    name: str
    volumes: Tuple[VolumeStats, ...] = ()


@dataclass(frozen=True)
class NodeStatsSnapshot:
    """The kubelet's view of every pod volume on one node"""

    node_name: str
    pods: Tuple[PodStats, ...] = ()

    def iter_volumes(self):
        for pod in self.pods:
            for volume in pod.volumes:
                yield volume


@dataclass(frozen=True)
class VolumeStatsResult:
    """Volume usage of a single broker"""

    pod: str
    node: str
    broker_id: int
    persistent_volume_claim: str
    capacity_bytes: int
    available_bytes: int
    used_bytes: int

    @property
    def used_ratio(self) -> float:
        if not self.capacity_bytes:
            return 0.0
        return self.used_bytes / self.capacity_bytes

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SkippedCandidate:
    """A candidate dropped from the results, and why"""

    pod: str
    node: Optional[str]
    error: CandidateError

    @property
    def reason(self) -> str:
        return self.error.kind

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pod': self.pod,
            'node': self.node,
            'reason': self.reason,
            'message': str(self.error),
        }


@dataclass
class VolumeStatsReport:
    """Results of one query plus the candidates that were skipped"""

    results: List[VolumeStatsResult] = field(default_factory=list)
    skipped: List[SkippedCandidate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [r.to_dict() for r in self.results],
            'skipped': [s.to_dict() for s in self.skipped],
        }
