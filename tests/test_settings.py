import os
import unittest
from unittest import mock

from sqlalchemy.engine import make_url

from storefront.utils import settings


class SettingsTestCase(unittest.TestCase):
    def test_default_database_url_uses_psycopg2(self):
        url = make_url(settings.DEFAULT_DATABASE_URL)
        self.assertEqual(url.get_backend_name(), "postgresql")
        self.assertEqual(url.get_driver_name(), "psycopg2")

    def test_flags(self):
        with mock.patch.dict(os.environ, {"FEATURE_X": " Yes "}):
            self.assertTrue(settings._flag("FEATURE_X"))
        with mock.patch.dict(os.environ, {"FEATURE_X": "0"}):
            self.assertFalse(settings._flag("FEATURE_X"))
        self.assertFalse(settings._flag("FEATURE_NOT_SET"))


if __name__ == "__main__":
    unittest.main()
