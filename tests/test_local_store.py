import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from reportsync.core.errors import CorruptCacheError, NotFoundError
from reportsync.core.reports import initialize_week
from reportsync.core.results import LoadState
from reportsync.core.schedule import WorkingDay
from reportsync.services.local_store import LocalReportStore


WEEK = date(2024, 1, 8)


class LocalReportStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.store = LocalReportStore(Path(self._tmp.name) / "WeekReports")
        self.report = initialize_week(WEEK, [WorkingDay(1, "09:00", "11:00")], student_id=3)

    def test_save_then_load_round_trip(self):
        self.report.day(WEEK).update_slot("09:00", "10:00", learning_description="Recursion", subject_id=2)
        self.report.update_totals()

        self.assertTrue(self.store.save(WEEK, self.report))
        result = self.store.load(WEEK)
        self.assertEqual(result.state, LoadState.OK)
        self.assertEqual(result.value, self.report)

    def test_file_named_after_week_start(self):
        self.store.save(WEEK, self.report)
        self.assertTrue((self.store.directory / "WeekReport_2024-01-08.json").is_file())
        self.assertTrue(self.store.exists(WEEK))
        self.assertEqual(self.store.list_weeks(), [WEEK])

    def test_save_overwrites(self):
        self.store.save(WEEK, self.report)
        self.report.weekly_summary = "second"
        self.store.save(WEEK, self.report)
        self.assertEqual(self.store.load(WEEK).value.weekly_summary, "second")
        self.assertEqual(len(list(self.store.directory.iterdir())), 1)

    def test_missing_file_is_not_found(self):
        result = self.store.load(WEEK)
        self.assertEqual(result.state, LoadState.NOT_FOUND)
        self.assertIsNone(result.unwrap_or_none())
        self.assertFalse(self.store.exists(WEEK))
        with self.assertRaises(NotFoundError):
            result.unwrap()

    def test_malformed_file_is_corrupt(self):
        self.store.directory.mkdir(parents=True)
        self.store.path_for(WEEK).write_text("{not json", encoding="utf-8")
        result = self.store.load(WEEK)
        self.assertTrue(result.is_corrupt)
        self.assertIsNone(result.unwrap_or_none())
        with self.assertRaises(CorruptCacheError):
            result.unwrap()

    def test_wrong_shape_is_corrupt(self):
        self.store.directory.mkdir(parents=True)
        self.store.path_for(WEEK).write_text('{"studentId": 1}', encoding="utf-8")
        self.assertTrue(self.store.load(WEEK).is_corrupt)

    def test_save_failure_returns_false_without_notifying(self):
        listener = mock.Mock()
        self.store.subscribe(listener)
        with mock.patch("reportsync.services.local_store.write_json_atomic", side_effect=OSError("disk full")):
            self.assertFalse(self.store.save(WEEK, self.report))
        listener.assert_not_called()

    def test_save_and_remove_notify_listeners(self):
        listener = mock.Mock()
        self.store.subscribe(listener)
        self.store.save(WEEK, self.report)
        self.assertTrue(self.store.remove(WEEK))
        self.assertFalse(self.store.exists(WEEK))
        self.assertEqual(listener.call_args_list, [mock.call(WEEK), mock.call(WEEK)])

    def test_remove_missing_file_still_notifies(self):
        listener = mock.Mock()
        self.store.subscribe(listener)
        self.assertTrue(self.store.remove(WEEK))
        listener.assert_called_once_with(WEEK)


if __name__ == "__main__":
    unittest.main()
