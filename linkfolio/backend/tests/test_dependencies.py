import unittest
from unittest.mock import patch

from linkfolio.backend.config import Settings
from linkfolio.backend.dependencies import build_profile_fetcher, select_storage
from linkfolio.backend.errors import StorageUnavailableError
from linkfolio.backend.profiles import HttpProfileFetcher, MockProfileFetcher
from linkfolio.backend.storage import InMemoryStorage


class SelectStorageTests(unittest.TestCase):
    def test_in_memory_when_disabled(self):
        storage = select_storage(Settings(use_document_store=False))
        self.assertIsInstance(storage, InMemoryStorage)

    @patch("linkfolio.backend.dependencies.MongoStorage")
    def test_falls_back_when_unreachable(self, mock_storage_cls):
        mock_storage_cls.return_value.ping.side_effect = StorageUnavailableError()
        with self.assertLogs("linkfolio.backend.dependencies", level="WARNING"):
            storage = select_storage(
                Settings(use_document_store=True, document_store_timeout_seconds=0.5)
            )
        self.assertIsInstance(storage, InMemoryStorage)
        _, kwargs = mock_storage_cls.call_args
        self.assertEqual(kwargs["timeout_seconds"], 0.5)
        mock_storage_cls.return_value.ensure_indexes.assert_not_called()

    @patch("linkfolio.backend.dependencies.MongoStorage")
    def test_uses_document_store_when_reachable(self, mock_storage_cls):
        storage = select_storage(Settings(use_document_store=True))
        self.assertIs(storage, mock_storage_cls.return_value)
        storage.ensure_indexes.assert_called_once_with()


class ProfileFetcherSelectionTests(unittest.TestCase):
    def test_mock_fetcher_without_api_url(self):
        fetcher = build_profile_fetcher(Settings(mock_fetch_delay_seconds=0))
        self.assertIsInstance(fetcher, MockProfileFetcher)
        self.assertEqual(fetcher.delay_seconds, 0)

    def test_http_fetcher_with_api_url(self):
        fetcher = build_profile_fetcher(
            Settings(profile_api_url="https://profiles.example/api")
        )
        self.assertIsInstance(fetcher, HttpProfileFetcher)
        self.assertEqual(fetcher.api_url, "https://profiles.example/api")


if __name__ == "__main__":
    unittest.main()
