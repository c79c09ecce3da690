import json
import unittest
from datetime import datetime, timezone

from app.services.checkin_service import CheckInVerifier, OutcomeKind, resolve_verification_code
from support import FakeReservationStore, reservation, PAYLOAD

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


class CheckInVerifierTests(unittest.IsolatedAsyncioTestCase):
    def make(self, store, **kwargs):
        self.sleeps = []

        async def fake_sleep(seconds):
            self.sleeps.append(seconds)

        kwargs.setdefault("retry_delay", 1.0)
        kwargs.setdefault("attempts", 3)
        return CheckInVerifier(store, sleep=fake_sleep, clock=lambda: FIXED_NOW, **kwargs)

    async def test_confirmed_reservation_with_matching_code_is_checked_in(self):
        store = FakeReservationStore(reservation())
        outcome = await self.make(store).verify(PAYLOAD)

        self.assertTrue(outcome.ok)
        self.assertIsNone(outcome.kind)
        # snapshot is the pre-update record
        self.assertEqual(outcome.reservation["status"], "confirmed")
        found = await store.find_by_business_id("R-1001")
        self.assertEqual(found["status"], "checked-in")
        self.assertTrue(found["checkedIn"])
        self.assertEqual(found["checkInTime"], FIXED_NOW)
        self.assertEqual(len(store.writes), 1)

    async def test_unparseable_payload_makes_no_store_calls(self):
        store = FakeReservationStore(reservation())
        for payload in ["not json", "{reservationId: R-1001}", "", "https://example.com/qr"]:
            outcome = await self.make(store).verify(payload)
            self.assertFalse(outcome.ok)
            self.assertEqual(outcome.kind, OutcomeKind.INVALID_FORMAT)
        self.assertEqual(store.lookups, 0)
        self.assertEqual(store.writes, [])

    async def test_deeply_nested_payload_is_invalid_format(self):
        store = FakeReservationStore(reservation())
        outcome = await self.make(store).verify("[" * 100000)
        self.assertEqual(outcome.kind, OutcomeKind.INVALID_FORMAT)
        self.assertEqual(store.lookups, 0)

    async def test_missing_or_empty_fields(self):
        store = FakeReservationStore(reservation())
        payloads = [
            {"reservationId": "R-1001"},
            {"verificationCode": "AB12CD"},
            {"reservationId": "", "verificationCode": "AB12CD"},
            {"reservationId": "R-1001", "verificationCode": ""},
            {"reservationId": 1001, "verificationCode": "AB12CD"},
        ]
        for p in payloads:
            outcome = await self.make(store).verify(json.dumps(p))
            self.assertEqual(outcome.kind, OutcomeKind.MISSING_FIELDS, p)
        outcome = await self.make(store).verify("[1, 2]")
        self.assertEqual(outcome.kind, OutcomeKind.MISSING_FIELDS)
        self.assertEqual(store.lookups, 0)

    async def test_unknown_reservation_is_looked_up_three_times(self):
        store = FakeReservationStore(reservation())
        payload = json.dumps({"reservationId": "R-9999", "verificationCode": "AB12CD"})
        outcome = await self.make(store).verify(payload)

        self.assertEqual(outcome.kind, OutcomeKind.NOT_FOUND)
        self.assertEqual(store.lookups, 3)
        self.assertEqual(self.sleeps, [1.0, 1.0])
        self.assertEqual(store.writes, [])

    async def test_retry_absorbs_replication_lag(self):
        store = FakeReservationStore(reservation(), visible_after=2)
        outcome = await self.make(store).verify(PAYLOAD)

        self.assertTrue(outcome.ok)
        self.assertEqual(store.lookups, 3)
        self.assertEqual(len(self.sleeps), 2)

    async def test_cancelled_wins_regardless_of_code(self):
        for code in ("AB12CD", "WRONG"):
            store = FakeReservationStore(reservation(status="cancelled"))
            payload = json.dumps({"reservationId": "R-1001", "verificationCode": code})
            outcome = await self.make(store).verify(payload)
            self.assertEqual(outcome.kind, OutcomeKind.CANCELLED)
            self.assertEqual(store.writes, [])

    async def test_pending_reservation_is_rejected(self):
        store = FakeReservationStore(reservation(status="pending"))
        outcome = await self.make(store).verify(PAYLOAD)
        self.assertEqual(outcome.kind, OutcomeKind.PENDING_CONFIRMATION)
        self.assertIn("pending confirmation", outcome.message)
        self.assertEqual(store.writes, [])

    async def test_unknown_status_is_never_written(self):
        for status in (None, "archived"):
            store = FakeReservationStore(reservation(status=status))
            outcome = await self.make(store).verify(PAYLOAD)
            self.assertEqual(outcome.kind, OutcomeKind.PENDING_CONFIRMATION)
            self.assertEqual(store.writes, [])

    async def test_commit_is_gated_on_confirmed(self):
        store = FakeReservationStore(reservation())
        calls = []
        original_update = store.update

        async def recording_update(record_id, fields, expected_status=None):
            calls.append(expected_status)
            return await original_update(record_id, fields, expected_status)

        store.update = recording_update
        await self.make(store).verify(PAYLOAD)
        self.assertEqual(calls, ["confirmed"])

    async def test_checked_in_flag_alone_blocks_check_in(self):
        store = FakeReservationStore(reservation(checkedIn=True))
        outcome = await self.make(store).verify(PAYLOAD)
        self.assertEqual(outcome.kind, OutcomeKind.ALREADY_CHECKED_IN)
        self.assertEqual(store.writes, [])

    async def test_second_scan_reports_already_checked_in(self):
        store = FakeReservationStore(reservation())
        verifier = self.make(store)
        first = await verifier.verify(PAYLOAD)
        second = await verifier.verify(PAYLOAD)

        self.assertTrue(first.ok)
        self.assertFalse(second.ok)
        self.assertEqual(second.kind, OutcomeKind.ALREADY_CHECKED_IN)
        self.assertEqual(len(store.writes), 1)

    async def test_legacy_flat_code_is_used_when_nested_is_absent(self):
        store = FakeReservationStore(reservation(qrData=None, qrVerificationCode="AB12CD"))
        outcome = await self.make(store).verify(PAYLOAD)
        self.assertTrue(outcome.ok)

    async def test_legacy_code_mismatch(self):
        store = FakeReservationStore(reservation(qrData=None, qrVerificationCode="ZZ99"))
        outcome = await self.make(store).verify(PAYLOAD)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.kind, OutcomeKind.CODE_MISMATCH)
        self.assertEqual(outcome.as_dict()["kind"], "CodeMismatch")
        self.assertEqual(store.writes, [])

    async def test_code_comparison_is_exact(self):
        store = FakeReservationStore(reservation())
        payload = json.dumps({"reservationId": "R-1001", "verificationCode": "ab12cd"})
        outcome = await self.make(store).verify(payload)
        self.assertEqual(outcome.kind, OutcomeKind.CODE_MISMATCH)

    async def test_missing_stored_code(self):
        store = FakeReservationStore(reservation(qrData={"guestName": "Maria"}, qrVerificationCode=""))
        outcome = await self.make(store).verify(PAYLOAD)
        self.assertEqual(outcome.kind, OutcomeKind.MISCONFIGURED_CODE)
        self.assertIn("regenerate", outcome.message)
        self.assertEqual(store.writes, [])

    async def test_failed_write_is_not_a_check_in(self):
        store = FakeReservationStore(reservation(), fail_writes=True)
        outcome = await self.make(store).verify(PAYLOAD)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.kind, OutcomeKind.STORE_UNAVAILABLE)
        self.assertEqual(store.docs["doc-1"]["status"], "confirmed")

    async def test_lookup_failures_are_retried(self):
        store = FakeReservationStore(reservation(), fail_lookups=2)
        outcome = await self.make(store).verify(PAYLOAD)
        self.assertTrue(outcome.ok)
        self.assertEqual(store.lookups, 3)

    async def test_backend_down_for_every_attempt(self):
        store = FakeReservationStore(reservation(), fail_lookups=3)
        outcome = await self.make(store).verify(PAYLOAD)
        self.assertEqual(outcome.kind, OutcomeKind.STORE_UNAVAILABLE)
        self.assertEqual(store.lookups, 3)

    async def test_status_changed_before_commit(self):
        store = FakeReservationStore(reservation())
        original_find = store.find_by_business_id

        async def find_then_cancel(reservation_id):
            doc = await original_find(reservation_id)
            store.docs["doc-1"]["status"] = "cancelled"  # front desk cancels mid-scan
            return doc

        store.find_by_business_id = find_then_cancel
        outcome = await self.make(store).verify(PAYLOAD)

        self.assertEqual(outcome.kind, OutcomeKind.CONCURRENT_CHECK_IN)
        self.assertEqual(store.writes, [])
        self.assertEqual(store.docs["doc-1"]["status"], "cancelled")

    async def test_single_attempt_configuration_does_not_sleep(self):
        store = FakeReservationStore()
        outcome = await self.make(store, attempts=1).verify(PAYLOAD)
        self.assertEqual(outcome.kind, OutcomeKind.NOT_FOUND)
        self.assertEqual(self.sleeps, [])


class ResolveCodeTests(unittest.TestCase):
    def test_nested_code_takes_precedence(self):
        doc = {"qrData": {"verificationCode": "NEW1"}, "qrVerificationCode": "OLD1"}
        self.assertEqual(resolve_verification_code(doc), "NEW1")

    def test_empty_nested_code_falls_back(self):
        doc = {"qrData": {"verificationCode": ""}, "qrVerificationCode": "OLD1"}
        self.assertEqual(resolve_verification_code(doc), "OLD1")

    def test_no_code(self):
        self.assertIsNone(resolve_verification_code({}))
