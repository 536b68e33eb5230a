"""
Error types for broker volume statistics collection

Only QueryError is fatal to a whole query. Every CandidateError subclass
disqualifies a single pod and is absorbed by the reader.
"""

from typing import Optional


class VolumeStatsError(Exception):
    """Base class for all volume statistics errors"""


class ConfigError(VolumeStatsError):
    """Configuration file could not be read or parsed"""


class QueryError(VolumeStatsError):
    """Listing candidate pods failed"""


class CandidateError(VolumeStatsError):
    """A single candidate pod was disqualified"""

    kind = "candidate"

    def __init__(self, message: str, pod_name: Optional[str] = None):
        super().__init__(message)
        self.pod_name = pod_name


class MissingLabelError(CandidateError):
    """Broker id label is absent from the pod"""

    kind = "missing_label"

    def __init__(self, label: str, pod_name: Optional[str] = None):
        super().__init__(f"no {label} label", pod_name)
        self.label = label


class InvalidFormatError(CandidateError):
    """Broker id label value is not an integer"""

    kind = "invalid_format"

    def __init__(self, label: str, value: str, pod_name: Optional[str] = None):
        super().__init__(f"{label} value {value!r} is not an integer", pod_name)
        self.label = label
        self.value = value


class NoClaimVolumeError(CandidateError):
    """Pod declares no PersistentVolumeClaim-backed volume"""

    kind = "no_claim_volume"

    def __init__(self, pod_name: Optional[str] = None):
        super().__init__("cannot find a PersistentVolumeClaim", pod_name)


class ProxyError(CandidateError):
    """Fetching or decoding a node's stats summary failed"""

    kind = "proxy_error"

    def __init__(self, message: str, node_name: str, pod_name: Optional[str] = None):
        super().__init__(message, pod_name)
        self.node_name = node_name


class NotFoundError(CandidateError):
    """No volume in the node summary references the claim"""

    kind = "not_found"

    def __init__(self, claim_name: str, namespace: str, node_name: str,
                 pod_name: Optional[str] = None):
        super().__init__(
            f"could not find PersistentVolumeClaim {claim_name} "
            f"in namespace {namespace} on node {node_name}",
            pod_name,
        )
        self.claim_name = claim_name
        self.namespace = namespace
        self.node_name = node_name
