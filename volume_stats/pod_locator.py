"""
Pod discovery for broker volume statistics

Lists pods through the Kubernetes API and reduces each one to a Candidate:
its name, node, labels and PersistentVolumeClaim bindings.
"""

import logging
from typing import List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from volume_stats.errors import QueryError
from volume_stats.models import Candidate, ClaimBinding

logger = logging.getLogger(__name__)


def candidate_from_pod(pod: client.V1Pod) -> Candidate:
    """
    Convert a V1Pod into a Candidate

    Volumes that are not backed by a PersistentVolumeClaim are dropped;
    the remaining claim bindings keep their declaration order.
    """
    metadata = pod.metadata
    spec = pod.spec
    claims = []
    for volume in (spec.volumes if spec and spec.volumes else []):
        if volume.persistent_volume_claim is None:
            continue
        claims.append(ClaimBinding(volume.name, volume.persistent_volume_claim.claim_name))

    return Candidate(
        name=metadata.name,
        namespace=metadata.namespace,
        node_name=spec.node_name if spec else None,
        labels=dict(metadata.labels or {}),
        claims=tuple(claims),
    )


class PodLocator:
    """Finds candidate broker pods by namespace and label selector"""

    def __init__(self, core_api: client.CoreV1Api, request_timeout: Optional[float] = None):
        self.core_api = core_api
        self.request_timeout = request_timeout

    def list(self, namespace: str, label_selector: str) -> List[Candidate]:
        """
        List the pods matching both filters

        Args:
            namespace: Namespace to search, passed to the API unchanged
            label_selector: Label selector expression, passed to the API unchanged

        Returns:
            List[Candidate]: One candidate per pod returned by the API

        Raises:
            QueryError: the pod list request failed
        """
        kwargs = {'label_selector': label_selector}
        if self.request_timeout:
            kwargs['_request_timeout'] = self.request_timeout

        try:
            pods = self.core_api.list_namespaced_pod(namespace, **kwargs)
        except ApiException as e:
            raise QueryError(
                f"listing pods in namespace {namespace} with selector {label_selector!r} "
                f"failed: {e.status} {e.reason}"
            ) from e
        except HTTPError as e:
            raise QueryError(f"listing pods in namespace {namespace} failed: {e}") from e

        candidates = [candidate_from_pod(pod) for pod in pods.items or []]
        logger.debug(f"Found {len(candidates)} pods in namespace {namespace} matching {label_selector!r}")
        return candidates
