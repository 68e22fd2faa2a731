import unittest

from fastapi.testclient import TestClient

from app.locations import LOCATIONS
from app.main import app


class TestMain(unittest.TestCase):
    def test_app_metadata(self):
        self.assertEqual(app.title, "CWA Forecast Proxy")

    def test_index_lists_endpoints_and_locations(self):
        resp = TestClient(app).get("/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["endpoints"]["cityWeather"], "/api/weather/{city}")
        self.assertEqual(len(body["locations"]), len(LOCATIONS))
        self.assertEqual(body["locations"]["taipei"], "臺北市")


if __name__ == "__main__":
    unittest.main()
