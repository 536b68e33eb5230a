"""
Broker volume statistics reader

Brokers cannot be asked for their disk usage directly. The reader lists the
broker pods, works out each pod's broker id and PersistentVolumeClaim, and
looks the claim up in the stats summary of the node the pod runs on.

Only a failure to list pods fails a query. A pod that cannot be resolved is
logged, recorded as skipped and left out of the results.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple, Union

from kubernetes import client

from volume_stats.errors import CandidateError
from volume_stats.identity import BROKER_ID_LABEL, extract_broker_id, extract_claim_name
from volume_stats.models import Candidate, SkippedCandidate, VolumeStatsReport, VolumeStatsResult
from volume_stats.node_stats import NodeSnapshotCache, NodeStatsCorrelator
from volume_stats.pod_locator import PodLocator

logger = logging.getLogger(__name__)

Outcome = Union[VolumeStatsResult, SkippedCandidate]


class VolumeStatsReader:
    """Reads volume statistics of broker pods from the Kubernetes API"""

    def __init__(self, core_api: client.CoreV1Api,
                 broker_id_label: str = BROKER_ID_LABEL,
                 max_workers: int = 1,
                 reuse_node_snapshots: bool = False,
                 request_timeout: Optional[float] = None):
        """
        Args:
            core_api: CoreV1Api client
            broker_id_label: Pod label holding the broker id
            max_workers: Number of concurrent node stats requests, 1 for sequential
            reuse_node_snapshots: Fetch each node's summary at most once per query
            request_timeout: Timeout in seconds for every API request
        """
        self.locator = PodLocator(core_api, request_timeout=request_timeout)
        self.correlator = NodeStatsCorrelator(core_api, request_timeout=request_timeout)
        self.broker_id_label = broker_id_label
        self.max_workers = max(1, int(max_workers))
        self.reuse_node_snapshots = reuse_node_snapshots

    @classmethod
    def from_config(cls, core_api: client.CoreV1Api, config_data: dict) -> 'VolumeStatsReader':
        stats_config = config_data.get('volume_stats', {})
        return cls(
            core_api,
            broker_id_label=stats_config.get('broker_id_label', BROKER_ID_LABEL),
            max_workers=stats_config.get('max_workers', 1),
            reuse_node_snapshots=stats_config.get('reuse_node_snapshots', False),
            request_timeout=config_data.get('kubernetes', {}).get('request_timeout'),
        )

    def get(self, namespace: str, label_selector: str) -> List[VolumeStatsResult]:
        """
        Get volume statistics for every broker pod matching the filters

        Args:
            namespace: Namespace of the broker pods
            label_selector: Label selector matching the broker pods

        Returns:
            List[VolumeStatsResult]: One entry per resolved broker, in no particular order

        Raises:
            QueryError: listing pods failed
        """
        return self.collect(namespace, label_selector).results

    def collect(self, namespace: str, label_selector: str) -> VolumeStatsReport:
        """Like get(), but also reports the pods that were skipped and why"""
        candidates = self.locator.list(namespace, label_selector)
        cache = NodeSnapshotCache() if self.reuse_node_snapshots else None

        if self.max_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(lambda c: self._resolve(c, namespace, cache), candidates))
        else:
            outcomes = [self._resolve(c, namespace, cache) for c in candidates]

        report = VolumeStatsReport()
        for outcome in outcomes:
            if isinstance(outcome, SkippedCandidate):
                report.skipped.append(outcome)
            else:
                report.results.append(outcome)

        logger.info(
            f"Collected volume stats for {len(report.results)} of {len(candidates)} pods "
            f"in namespace {namespace} ({len(report.skipped)} skipped)"
        )
        return report

    def _identify(self, candidate: Candidate) -> Tuple[int, str]:
        broker_id = extract_broker_id(candidate, self.broker_id_label)
        return broker_id, extract_claim_name(candidate)

    def _resolve(self, candidate: Candidate, namespace: str,
                 cache: Optional[NodeSnapshotCache]) -> Outcome:
        try:
            broker_id, claim_name = self._identify(candidate)
            volume = self.correlator.fetch_volume_stats(
                candidate.node_name, namespace, claim_name, cache=cache
            )
        except CandidateError as e:
            if e.pod_name is None:
                e.pod_name = candidate.name
            logger.warning(f"skipping pod {candidate.name}: {e.kind}: {e}")
            return SkippedCandidate(candidate.name, candidate.node_name, e)

        return VolumeStatsResult(
            pod=candidate.name,
            node=candidate.node_name,
            broker_id=broker_id,
            persistent_volume_claim=claim_name,
            capacity_bytes=volume.capacity_bytes,
            available_bytes=volume.available_bytes,
            used_bytes=volume.used_bytes,
        )
