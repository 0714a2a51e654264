import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from cinematch.agents.intent_router import IntentRouter
from cinematch.services.list_operations import ListOperations
from cinematch.services.list_store import JsonListStore
from main import app, get_router


class TestHttpApi(unittest.TestCase):
    def setUp(self):
        self.agent = MagicMock()
        self.agent.respond.return_value = "Essaie Heat."
        self.router = IntentRouter(ListOperations(JsonListStore()), self.agent)
        app.dependency_overrides[get_router] = lambda: self.router
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_chat_routes_message(self):
        response = self.client.post("/chat", json={"message": "Add Heat, Alien to my wishlist"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["reply"].endswith("(2)"))
        self.assertTrue(body["request_id"])

    def test_chat_delegates(self):
        response = self.client.post("/chat", json={"message": "Un polar ?"})
        body = response.json()
        self.assertEqual(body["reply"], "Essaie Heat.")
        self.agent.respond.assert_called_once_with("Un polar ?", request_id=body["request_id"])

    def test_chat_requires_message(self):
        self.assertEqual(self.client.post("/chat", json={}).status_code, 422)

    def test_lists(self):
        self.client.post("/chat", json={"message": "Add Heat, Alien to my wishlist"})

        response = self.client.get("/lists/wishlist", params={"order": "asc"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "envie", "titles": ["Alien", "Heat"]})
        self.assertEqual(self.client.get("/lists/deja_vu").json()["titles"], [])

    def test_unknown_list(self):
        self.assertEqual(self.client.get("/lists/tomorrow").status_code, 404)

    def test_stats(self):
        self.client.post("/chat", json={"message": "I've seen Heat"})

        response = self.client.get("/stats")

        self.assertEqual(response.json(), {"total": 1, "envie": 0, "deja_vu": 1, "pas_interesse": 0})


if __name__ == "__main__":
    unittest.main()
