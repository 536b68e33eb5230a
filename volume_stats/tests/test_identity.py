import unittest

from volume_stats.errors import MissingLabelError, InvalidFormatError, NoClaimVolumeError
from volume_stats.identity import extract_broker_id, extract_claim_name
from volume_stats.models import Candidate, ClaimBinding


def candidate(labels=None, claims=()):
    return Candidate(name="broker-0", namespace="kafka", node_name="node-a",
                     labels=labels or {}, claims=tuple(claims))


class TestExtractBrokerId(unittest.TestCase):
    def test_parses_label(self):
        self.assertEqual(extract_broker_id(candidate({"kafka_broker_id": "101"})), 101)

    def test_zero(self):
        self.assertEqual(extract_broker_id(candidate({"kafka_broker_id": "0"})), 0)

    def test_signed_values_are_integers(self):
        self.assertEqual(extract_broker_id(candidate({"kafka_broker_id": "-3"})), -3)
        self.assertEqual(extract_broker_id(candidate({"kafka_broker_id": "+7"})), 7)

    def test_missing_label(self):
        with self.assertRaises(MissingLabelError) as ctx:
            extract_broker_id(candidate({"app": "kafka"}))
        self.assertEqual(ctx.exception.pod_name, "broker-0")
        self.assertIn("kafka_broker_id", str(ctx.exception))

    def test_non_integer_values(self):
        for value in ["", "abc", "1.5", " 1", "1 ", "0x10", "1_000", "-", "١٢"]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidFormatError) as ctx:
                    extract_broker_id(candidate({"kafka_broker_id": value}))
                self.assertEqual(ctx.exception.value, value)

    def test_int64_bounds(self):
        self.assertEqual(extract_broker_id(candidate({"kafka_broker_id": "9223372036854775807"})), 2 ** 63 - 1)
        self.assertEqual(extract_broker_id(candidate({"kafka_broker_id": "-9223372036854775808"})), -2 ** 63)
        for value in ["9223372036854775808", "-9223372036854775809", "1" * 40]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidFormatError):
                    extract_broker_id(candidate({"kafka_broker_id": value}))

    def test_custom_label(self):
        c = candidate({"broker": "5", "kafka_broker_id": "9"})
        self.assertEqual(extract_broker_id(c, label="broker"), 5)


class TestExtractClaimName(unittest.TestCase):
    def test_single_claim(self):
        c = candidate(claims=[ClaimBinding("data", "data-broker-0")])
        self.assertEqual(extract_claim_name(c), "data-broker-0")

    def test_first_claim_wins(self):
        c = candidate(claims=[ClaimBinding("data", "first"), ClaimBinding("logs", "second")])
        self.assertEqual(extract_claim_name(c), "first")

    def test_no_claims(self):
        with self.assertRaises(NoClaimVolumeError) as ctx:
            extract_claim_name(candidate())
        self.assertEqual(ctx.exception.pod_name, "broker-0")


if __name__ == '__main__':
    unittest.main()
