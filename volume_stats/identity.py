"""
Broker and claim identity extraction

Both functions are pure: they look only at the Candidate they are given.
"""

from volume_stats.errors import MissingLabelError, InvalidFormatError, NoClaimVolumeError
from volume_stats.models import Candidate

BROKER_ID_LABEL = "kafka_broker_id"

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def _parse_int(value: str) -> int:
    """
    Parse a base-10 signed 64-bit integer with an optional sign

    Unlike int(), surrounding whitespace, underscores, non-ASCII digits and
    values outside the int64 range are rejected.
    """
    digits = value[1:] if value[:1] in ('+', '-') else value
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"invalid integer literal: {value!r}")
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError(f"integer out of range: {value!r}")
    return number


def extract_broker_id(candidate: Candidate, label: str = BROKER_ID_LABEL) -> int:
    """
    Get the broker id from the candidate's broker id label

    Args:
        candidate: Pod to inspect
        label: Label key holding the broker id

    Returns:
        int: Broker id

    Raises:
        MissingLabelError: label is absent
        InvalidFormatError: label value is not an integer
    """
    value = candidate.labels.get(label)
    if value is None:
        raise MissingLabelError(label, pod_name=candidate.name)
    try:
        return _parse_int(value)
    except ValueError:
        raise InvalidFormatError(label, value, pod_name=candidate.name) from None


def extract_claim_name(candidate: Candidate) -> str:
    """
    Get the claim name of the first PVC-backed volume declared by the candidate

    Raises:
        NoClaimVolumeError: the candidate has no PVC-backed volume
    """
    # Only the first claim is used; brokers are expected to mount a single data volume.
    for binding in candidate.claims:
        return binding.claim_name
    raise NoClaimVolumeError(pod_name=candidate.name)
