import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from reportsync.core.errors import AuthError, TransportError, ValidationError
from reportsync.core.profile import StudentProfile
from reportsync.core.reports import initialize_week
from reportsync.core.schedule import WorkingDay
from reportsync.core.status import ReportStatus, StatusEngine
from reportsync.services.local_store import LocalReportStore
from reportsync.services.report_service import ReportSyncService


WEEK = date(2024, 1, 8)
TODAY = date(2024, 1, 15)
SCHEDULE = [WorkingDay(1, "09:00", "11:00")]


class ReportSyncServiceTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.student = StudentProfile(id=9, release_id=1, join_course_date="2024-01-08", working_days=SCHEDULE)
        self.store = LocalReportStore(Path(self._tmp.name))
        self.engine = StatusEngine()
        self.store.subscribe(self.engine.invalidate)
        self.gateway = mock.Mock()
        self.gateway.fetch.return_value = None
        self.service = ReportSyncService(self.student, self.store, self.gateway, self.engine, clock=lambda: TODAY)

    async def test_load_week_prefers_local_draft(self):
        draft = initialize_week(WEEK, SCHEDULE, student_id=9)
        draft.weekly_summary = "draft"
        self.store.save(WEEK, draft)

        loaded = await self.service.load_week(date(2024, 1, 10))
        self.assertEqual(loaded.weekly_summary, "draft")
        self.gateway.fetch.assert_not_called()

    async def test_load_week_falls_back_to_remote(self):
        remote = initialize_week(WEEK, SCHEDULE, student_id=9)
        remote.weekly_summary = "remote"
        self.gateway.fetch.return_value = remote

        loaded = await self.service.load_week(WEEK)
        self.assertEqual(loaded.weekly_summary, "remote")
        self.gateway.fetch.assert_called_once_with(9, 2024, 2)

    async def test_load_week_builds_fresh_report(self):
        loaded = await self.service.load_week(WEEK)
        self.assertEqual(loaded.key, (9, WEEK))
        self.assertEqual(len(loaded.daily_reports), 7)
        self.assertEqual(len(loaded.daily_reports[0].hourly_reports), 2)

    async def test_corrupt_draft_is_treated_as_miss(self):
        self.store.path_for(WEEK).write_text("{", encoding="utf-8")
        loaded = await self.service.load_week(WEEK)
        self.assertEqual(loaded.weekly_summary, None)
        self.gateway.fetch.assert_called_once()

    async def test_load_week_outside_window(self):
        with self.assertRaises(ValidationError):
            await self.service.load_week(date(2024, 1, 1))
        with self.assertRaises(ValidationError):
            await self.service.load_week(date(2024, 1, 22))

    async def test_save_updates_totals_and_status(self):
        report = await self.service.load_week(WEEK)
        self.assertEqual(await self.service.status(WEEK), ReportStatus.NONE)

        report.day(WEEK).update_slot("09:00", "10:00", learning_description="Loops", subject_id=3)
        self.assertTrue(await self.service.save(report))
        self.assertEqual(report.total_hours_reported, 1.0)
        self.assertEqual(await self.service.status(WEEK), ReportStatus.PARTIAL)

        report.day(WEEK).update_slot("10:00", "11:00", learning_description="Classes")
        await self.service.save(report)
        self.assertEqual(await self.service.status(WEEK), ReportStatus.COMPLETE)

    async def test_submit_removes_draft_after_success(self):
        report = await self.service.load_week(WEEK)
        report.day(WEEK).update_slot("09:00", "10:00", learning_description="Loops")

        outcome = await self.service.submit(report)
        self.assertEqual((outcome.saved, outcome.submitted, outcome.draft_removed), (True, True, True))
        self.gateway.submit.assert_called_once_with(report)
        self.assertFalse(self.store.exists(WEEK))

    async def test_submit_saves_before_remote_write(self):
        report = await self.service.load_week(WEEK)
        self.gateway.submit.side_effect = lambda r: self.assertTrue(self.store.exists(WEEK))
        await self.service.submit(report)

    async def test_failed_submit_keeps_draft(self):
        report = await self.service.load_week(WEEK)
        report.day(WEEK).update_slot("09:00", "10:00", learning_description="Loops")
        self.gateway.submit.side_effect = TransportError("server error", status_code=500)

        with self.assertRaises(TransportError):
            await self.service.submit(report)
        self.assertTrue(self.store.exists(WEEK))
        self.assertEqual(self.store.load(WEEK).value.day(WEEK).hourly_reports[0].learning_description, "Loops")

    async def test_failed_save_skips_remote(self):
        report = await self.service.load_week(WEEK)
        with mock.patch.object(self.store, "save", return_value=False):
            outcome = await self.service.submit(report)
        self.assertFalse(outcome.saved)
        self.assertFalse(outcome.submitted)
        self.gateway.submit.assert_not_called()

    async def test_failed_draft_removal_is_reported(self):
        report = await self.service.load_week(WEEK)
        with mock.patch.object(self.store, "remove", return_value=False):
            outcome = await self.service.submit(report)
        self.assertTrue(outcome.submitted)
        self.assertFalse(outcome.draft_removed)
        self.assertTrue(self.store.exists(WEEK))

    async def test_leftover_draft_is_marked_submitted(self):
        self.gateway.submit.side_effect = lambda r: r.mark_submitted()
        report = await self.service.load_week(WEEK)
        report.day(WEEK).update_slot("09:00", "10:00", learning_description="Loops")
        with mock.patch.object(self.store, "remove", return_value=False):
            outcome = await self.service.submit(report)
        self.assertFalse(outcome.draft_removed)
        slots = list(self.store.load(WEEK).value.slots())
        self.assertTrue(slots)
        self.assertTrue(all(slot.is_submitted for slot in slots))

    async def test_auth_error_propagates(self):
        self.gateway.fetch.side_effect = AuthError("Not authenticated")
        with self.assertRaises(AuthError):
            await self.service.load_week(WEEK)

    async def test_week_overview(self):
        report = await self.service.load_week(WEEK)
        report.day(WEEK).update_slot("09:00", "10:00", learning_description="Loops")
        await self.service.save(report)

        overview = await self.service.week_overview()
        self.assertEqual(overview, {WEEK: ReportStatus.PARTIAL, TODAY: ReportStatus.NONE})


if __name__ == "__main__":
    unittest.main()
