import unittest

from project_backup.config import Settings
from project_backup.errors import MissingProjectDataError, MissingUserIdError
from project_backup.schemas import BackupMetadata, BackupRecord, SaveBackupRequest
from project_backup.service import BackupService, generate_version_tag
from project_backup.store import InMemoryBackupStore
from project_backup.validation import DataValidity, check_project_data


def make_record(backup_id, user_id, timestamp, project_data):
    return BackupRecord(
        projectData=project_data,
        backupMetadata=BackupMetadata(
            backupId=backup_id,
            timestamp=timestamp,
            userId=user_id,
            version="v1",
            syncAction="BACKUP",
            backupType="AUTO",
            backupSource="자동 백업",
            syncLogs=[],
        ),
    )


class StaleUserIndexStore(InMemoryBackupStore):
    """Per-user lookup misses records that a full scan still finds."""

    def query_by_user(self, user_id):
        return []


class CheckProjectDataTests(unittest.TestCase):
    def test_non_empty_phases_are_valid(self):
        self.assertEqual(
            check_project_data({"projectPhases": [{"id": "p1"}]}), DataValidity.VALID
        )

    def test_empty_phases(self):
        self.assertEqual(
            check_project_data({"projectPhases": []}), DataValidity.EMPTY_PHASES
        )

    def test_missing_or_wrong_type_is_malformed(self):
        self.assertEqual(check_project_data({}), DataValidity.MALFORMED)
        self.assertEqual(
            check_project_data({"projectPhases": "p1"}), DataValidity.MALFORMED
        )
        self.assertEqual(check_project_data(None), DataValidity.MALFORMED)


class BackupServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryBackupStore()
        self.service = BackupService(self.store, Settings())

    def test_save_requires_project_data(self):
        with self.assertRaises(MissingProjectDataError):
            self.service.save(SaveBackupRequest(userId="u1"))
        self.assertEqual(self.store.count(), 0)

    def test_empty_project_data_object_is_accepted(self):
        response = self.service.save(SaveBackupRequest(projectData={}, userId="u1"))
        self.assertEqual(response.dataSize.workflow_count, 0)
        self.assertEqual(response.dataSize.log_count, 1)
        self.assertEqual(self.store.count(), 1)

    def test_save_builds_metadata(self):
        response = self.service.save(
            SaveBackupRequest(
                projectData={
                    "projectPhases": [{"id": "p1"}],
                    "logs": [{"timestamp": "t0", "message": "earlier"}],
                    "version": "v-client",
                    "extra": {"kept": True},
                },
                userId="u1",
                backupType="MANUAL",
                backupSource="수동 저장",
            )
        )
        (record,) = self.store.query_by_user("u1")
        metadata = record.backupMetadata
        self.assertEqual(metadata.backupId, response.backupId)
        self.assertEqual(metadata.timestamp, response.savedAt)
        self.assertEqual(metadata.version, "v-client")
        self.assertEqual(metadata.syncAction, "BACKUP")
        self.assertEqual(metadata.backupType, "MANUAL")
        self.assertEqual(metadata.backupSource, "수동 저장")
        self.assertIsNone(metadata.restoreCount)
        self.assertEqual(len(metadata.syncLogs), 2)
        backup_log = metadata.syncLogs[-1]
        self.assertEqual(backup_log["type"], "BACKUP")
        self.assertIn("수동 저장", backup_log["message"])
        self.assertIn("MANUAL", backup_log["message"])
        self.assertEqual(record.projectData["logs"], metadata.syncLogs)
        self.assertEqual(record.projectData["extra"], {"kept": True})

    def test_non_dict_log_entries_are_kept(self):
        self.service.save(
            SaveBackupRequest(
                projectData={"projectPhases": [{"id": "p1"}], "logs": ["free text", 3]},
                userId="u1",
            )
        )
        response = self.service.retrieve("u1")
        self.assertEqual(response.projectData["logs"][:2], ["free text", 3])
        self.assertEqual(len(response.projectData["logs"]), 4)
        (record,) = self.store.query_by_user("u1")
        self.assertEqual(record.backupMetadata.syncLogs[:2], ["free text", 3])

    def test_non_list_logs_value_is_left_as_sent(self):
        response = self.service.save(
            SaveBackupRequest(
                projectData={"projectPhases": [{"id": "p1"}], "logs": {"note": "x"}},
                userId="u1",
            )
        )
        self.assertEqual(response.dataSize.log_count, 1)
        (record,) = self.store.query_by_user("u1")
        self.assertEqual(record.projectData["logs"], {"note": "x"})
        self.assertEqual(record.backupMetadata.syncLogs[0]["type"], "BACKUP")

        restored = self.service.retrieve("u1")
        self.assertEqual(restored.projectData["logs"], {"note": "x"})
        (record,) = self.store.query_by_user("u1")
        self.assertEqual(record.backupMetadata.restoreCount, 1)
        self.assertEqual(record.backupMetadata.syncLogs[-1]["type"], "RESTORE")

    def test_generated_version_is_written_to_both_places(self):
        for given in ({"version": 7}, {}):
            self.store.reset()
            self.service.save(
                SaveBackupRequest(
                    projectData={"projectPhases": [{"id": "p1"}], **given}, userId="u1"
                )
            )
            (record,) = self.store.query_by_user("u1")
            self.assertTrue(record.backupMetadata.version.startswith("v"))
            self.assertEqual(record.projectData["version"], record.backupMetadata.version)

    def test_save_defaults_user_and_type(self):
        response = self.service.save(
            SaveBackupRequest(projectData={"projectPhases": []})
        )
        self.assertTrue(response.backupId.startswith("backup_anonymous_"))
        self.assertEqual(response.backupType, "AUTO")
        self.assertEqual(response.backupSource, "자동 백업")

    def test_save_does_not_touch_existing_records(self):
        self.store.put(
            "old",
            make_record("old", "u1", "2020-01-01T00:00:00.000Z", {"projectPhases": [1]}),
        )
        self.service.save(SaveBackupRequest(projectData={"projectPhases": [2]}, userId="u1"))
        records = {r.backupMetadata.backupId: r for r in self.store.query_by_user("u1")}
        self.assertEqual(records["old"].projectData, {"projectPhases": [1]})

    def test_retrieve_requires_user_id(self):
        with self.assertRaises(MissingUserIdError):
            self.service.retrieve(None)
        with self.assertRaises(MissingUserIdError):
            self.service.retrieve("")

    def test_retrieve_picks_newest_timestamp(self):
        self.store.put(
            "newer",
            make_record("newer", "u1", "2024-05-02T00:00:00.000Z", {"projectPhases": ["new"]}),
        )
        self.store.put(
            "older",
            make_record("older", "u1", "2024-05-01T00:00:00.000Z", {"projectPhases": ["old"]}),
        )
        response = self.service.retrieve("u1")
        self.assertEqual(response.projectId, "newer")
        self.assertEqual(response.projectData["projectPhases"], ["new"])

    def test_retrieve_tie_goes_to_later_insertion(self):
        timestamp = "2024-05-01T00:00:00.000Z"
        self.store.put("first", make_record("first", "u1", timestamp, {"projectPhases": [1]}))
        self.store.put("second", make_record("second", "u1", timestamp, {"projectPhases": [2]}))
        self.assertEqual(self.service.retrieve("u1").projectId, "second")

    def test_restore_updates_record_in_place(self):
        self.store.put(
            "b1",
            make_record("b1", "u1", "2024-05-01T00:00:00.000Z", {"projectPhases": [1]}),
        )
        response = self.service.retrieve("u1")
        self.assertEqual(response.restoreCount, 1)
        self.assertEqual(self.store.count(), 1)

        (record,) = self.store.query_by_user("u1")
        metadata = record.backupMetadata
        self.assertEqual(metadata.restoreCount, 1)
        self.assertEqual(metadata.lastRestoreTimestamp, response.retrievedAt)
        restore_log = metadata.syncLogs[-1]
        self.assertEqual(restore_log["type"], "RESTORE")
        self.assertEqual(restore_log["backupId"], "b1")
        self.assertEqual(restore_log["backupTimestamp"], "2024-05-01T00:00:00.000Z")
        self.assertEqual(restore_log["syncAction"], "BACKUP")
        self.assertEqual(restore_log["backupType"], "AUTO")
        self.assertEqual(restore_log["backupSource"], "자동 백업")
        # Record had no logs list; one is created for the restore entry.
        self.assertEqual(record.projectData["logs"], [restore_log])

    def test_malformed_record_is_protected(self):
        self.store.put(
            "bad",
            make_record("bad", "u1", "2024-05-01T00:00:00.000Z", {"projectPhases": "x"}),
        )
        response = self.service.retrieve("u1")
        self.assertTrue(response.dataProtected)
        self.assertEqual(response.projectData, {"projectPhases": "x"})
        (record,) = self.store.query_by_user("u1")
        self.assertIsNone(record.backupMetadata.restoreCount)
        self.assertEqual(self.store.count(), 1)

    def test_bootstrap_record_shape(self):
        response = self.service.retrieve("new-user")
        self.assertTrue(response.isInitialData)
        (record,) = self.store.query_by_user("new-user")
        metadata = record.backupMetadata
        self.assertEqual(metadata.backupId, response.projectId)
        self.assertEqual(metadata.syncAction, "INITIAL_CREATE")
        self.assertEqual(metadata.backupType, "SYSTEM")
        self.assertEqual(record.projectData["version"], metadata.version)
        self.assertTrue(metadata.version.startswith("v"))
        self.assertEqual(record.projectData["logs"][0]["type"], "SYSTEM_INIT")
        self.assertEqual(metadata.syncLogs, record.projectData["logs"])

    def test_recheck_before_bootstrap_protects_existing_records(self):
        store = StaleUserIndexStore()
        store.put(
            "b1",
            make_record("b1", "u1", "2024-05-01T00:00:00.000Z", {"projectPhases": [1]}),
        )
        service = BackupService(store, Settings())

        response = service.retrieve("u1")
        self.assertFalse(response.success)
        self.assertTrue(response.isEmpty)
        self.assertTrue(response.protectedData)
        self.assertIsNone(response.projectData)
        self.assertEqual(store.count(), 1)

    def test_version_tag_format(self):
        tag = generate_version_tag()
        prefix, suffix = tag.split("-")
        self.assertTrue(prefix.startswith("v"))
        self.assertTrue(prefix[1:].isdigit())
        self.assertEqual(len(suffix), 8)

    def test_check_version(self):
        response = self.service.check_version()
        self.assertTrue(response.success)
        self.assertTrue(response.latestVersion.startswith("v"))


if __name__ == "__main__":
    unittest.main()
