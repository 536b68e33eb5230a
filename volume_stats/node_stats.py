"""
Node statistics correlation

There is no pod API for volume usage. Instead the kubelet's /stats/summary
document is fetched through the API server node proxy and filtered down to
the PersistentVolumeClaim of interest. This requires `get nodes/proxy`
permission.
"""

import json
import logging
import threading
from typing import Dict, Any, Optional, Union

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from volume_stats.errors import ProxyError, NotFoundError
from volume_stats.models import NodeStatsSnapshot, PodStats, VolumeStats, PVCReference

logger = logging.getLogger(__name__)

STATS_SUMMARY_PATH = "stats/summary"


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer byte count, got {value!r}")
    return value


def _parse_volume(entry: Dict[str, Any]) -> VolumeStats:
    pvc_ref = entry.get('pvcRef')
    return VolumeStats(
        name=entry.get('name', ''),
        pvc_ref=PVCReference(pvc_ref.get('namespace', ''), pvc_ref.get('name', '')) if pvc_ref else None,
        capacity_bytes=_optional_int(entry.get('capacityBytes')),
        available_bytes=_optional_int(entry.get('availableBytes')),
        used_bytes=_optional_int(entry.get('usedBytes')),
    )


def parse_snapshot(payload: Dict[str, Any], node_name: str) -> NodeStatsSnapshot:
    """
    Build a NodeStatsSnapshot from a decoded kubelet stats summary

    Optional keys the kubelet leaves out (pod `volume` lists, `pvcRef`,
    byte counters) are tolerated.

    Args:
        payload: Decoded JSON document
        node_name: Node the document was fetched from

    Raises:
        ProxyError: the document does not have the summary shape
    """
    try:
        if not isinstance(payload, dict):
            raise ValueError("summary is not a JSON object")
        pods = []
        for pod in payload.get('pods') or []:
            pod_ref = pod.get('podRef') or {}
            volumes = tuple(_parse_volume(v) for v in pod.get('volume') or [])
            pods.append(PodStats(pod_ref.get('namespace', ''), pod_ref.get('name', ''), volumes))
        reported_name = (payload.get('node') or {}).get('nodeName') or node_name
    except (AttributeError, TypeError, ValueError) as e:
        raise ProxyError(f"malformed stats summary from node {node_name}: {e}", node_name) from e

    return NodeStatsSnapshot(node_name=reported_name, pods=tuple(pods))


def find_volume(snapshot: NodeStatsSnapshot, namespace: str, claim_name: str) -> VolumeStats:
    """
    Find the volume whose claim reference matches namespace and claim name exactly

    Raises:
        NotFoundError: no volume on the node references the claim
    """
    for volume in snapshot.iter_volumes():
        ref = volume.pvc_ref
        if ref is not None and ref.namespace == namespace and ref.name == claim_name:
            return volume
    raise NotFoundError(claim_name, namespace, snapshot.node_name)


class NodeSnapshotCache:
    """
    Memoises node snapshots and fetch failures for the lifetime of one query

    A failed fetch is remembered and re-raised for every later lookup of the
    same node, so each candidate on that node still sees its own error.
    """

    def __init__(self):
        self._entries: Dict[str, Union[NodeStatsSnapshot, ProxyError]] = {}
        self._lock = threading.Lock()

    def get(self, node_name: str, fetch) -> NodeStatsSnapshot:
        with self._lock:
            entry = self._entries.get(node_name)
        if entry is None:
            try:
                entry = fetch(node_name)
            except ProxyError as e:
                entry = e
            with self._lock:
                entry = self._entries.setdefault(node_name, entry)
        if isinstance(entry, ProxyError):
            raise ProxyError(str(entry), node_name) from entry
        return entry

    def __len__(self):
        return len(self._entries)


class NodeStatsCorrelator:
    """Fetches a node's stats summary and extracts one claim's volume stats"""

    def __init__(self, core_api: client.CoreV1Api, request_timeout: Optional[float] = None):
        self.core_api = core_api
        self.request_timeout = request_timeout

    def fetch_snapshot(self, node_name: str) -> NodeStatsSnapshot:
        """
        Fetch the full stats summary of a node

        Every call issues a new request.

        Raises:
            ProxyError: transport failure, non-2xx response or malformed payload
        """
        if not node_name:
            raise ProxyError("pod is not scheduled to a node", node_name or '')

        kwargs = {'_preload_content': False}
        if self.request_timeout:
            kwargs['_request_timeout'] = self.request_timeout

        try:
            response = self.core_api.connect_get_node_proxy_with_path(
                node_name, STATS_SUMMARY_PATH, **kwargs
            )
            raw = response.data
        except ApiException as e:
            raise ProxyError(
                f"GET nodes/{node_name}/proxy/{STATS_SUMMARY_PATH} failed: {e.status} {e.reason}",
                node_name,
            ) from e
        except HTTPError as e:
            raise ProxyError(f"GET nodes/{node_name}/proxy/{STATS_SUMMARY_PATH} failed: {e}", node_name) from e

        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ProxyError(f"stats summary from node {node_name} is not valid JSON: {e}", node_name) from e

        snapshot = parse_snapshot(payload, node_name)
        logger.debug(f"Fetched stats summary for {len(snapshot.pods)} pods from node {node_name}")
        return snapshot

    def fetch_volume_stats(self, node_name: str, namespace: str, claim_name: str,
                           cache: Optional[NodeSnapshotCache] = None) -> VolumeStats:
        """
        Get the stats of the volume bound to a claim on a node

        Args:
            node_name: Node the claim's pod runs on
            namespace: Namespace of the claim
            claim_name: Name of the PersistentVolumeClaim
            cache: Optional per-query snapshot cache

        Returns:
            VolumeStats: Matching entry, with all three byte counters set

        Raises:
            ProxyError: fetching the summary failed or the entry has no counters
            NotFoundError: no volume on the node references the claim
        """
        if cache is not None:
            snapshot = cache.get(node_name, self.fetch_snapshot)
        else:
            snapshot = self.fetch_snapshot(node_name)

        volume = find_volume(snapshot, namespace, claim_name)
        if None in (volume.capacity_bytes, volume.available_bytes, volume.used_bytes):
            raise ProxyError(
                f"stats summary from node {node_name} has no byte counters for PersistentVolumeClaim {claim_name}",
                node_name,
            )
        return volume
