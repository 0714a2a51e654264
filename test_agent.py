import json
import random
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from cinematch.agents.intent_router import IntentRouter
from cinematch.config.settings import Settings
from cinematch.core.agent import (
    LLM_ERROR_MESSAGE,
    STUCK_MESSAGE,
    MovieAgent,
    build_router,
    profile_for,
)
from cinematch.core.context import EMPTY_LIST_TEXT, build_messages
from cinematch.core.recommender import FALLBACK_PLATFORMS, MYSTERY_TITLE, RANDOM_REASON
from cinematch.models.profile import Profile
from cinematch.models.status import Status
from cinematch.services.list_operations import ListOperations
from cinematch.services.list_store import JsonListStore


def _tool_call(name, arguments, call_id="call-1"):
    return {"type": "tool", "tool_calls": [{"id": call_id, "name": name, "arguments": arguments}]}


class TestBuildMessages(unittest.TestCase):
    def setUp(self):
        self.ops = ListOperations(JsonListStore())

    def test_empty_lists_are_reported(self):
        messages = build_messages(self.ops, Profile.default_cinema_expert(), "Salut")

        system = messages[0]["content"]
        self.assertEqual(messages[0]["role"], "system")
        self.assertEqual(system.count(EMPTY_LIST_TEXT), 3)
        self.assertEqual(messages[-1], {"role": "user", "content": "Salut"})

    def test_lists_and_history_are_included(self):
        self.ops.add("Alien")
        self.ops.mark_seen("Heat")
        history = [
            {"role": "user", "content": "Bonjour"},
            {"role": "assistant", "content": "Bonjour !"},
            {"role": "tool", "content": "ignored"},
        ]

        messages = build_messages(self.ops, Profile.humoristic_critic(), "Et maintenant ?", history)

        system = messages[0]["content"]
        self.assertIn("Films déjà vus : Heat", system)
        self.assertIn("Films qu'il souhaite voir : Alien", system)
        self.assertIn("humour", system)
        self.assertEqual([m["role"] for m in messages], ["system", "user", "assistant", "user"])


class TestMovieAgent(unittest.TestCase):
    def setUp(self):
        self.store = JsonListStore()
        self.agent = MovieAgent(ListOperations(self.store), max_steps=3)

    def test_plain_answer_is_returned_and_remembered(self):
        with patch("cinematch.core.agent.call_llm", return_value={"type": "message", "content": "Essaie Heat."}):
            reply = self.agent.respond("Un polar ?")

        self.assertEqual(reply, "Essaie Heat.")
        self.assertEqual(
            self.agent.history,
            [{"role": "user", "content": "Un polar ?"}, {"role": "assistant", "content": "Essaie Heat."}],
        )

    def test_tool_call_then_answer(self):
        responses = [
            _tool_call("add_to_wishlist", {"title": "Alien"}),
            {"type": "message", "content": "C'est noté."},
        ]
        with patch("cinematch.core.agent.call_llm", side_effect=responses) as llm:
            reply = self.agent.respond("ajoute Alien et enlève Heat")

        self.assertEqual(reply, "C'est noté.")
        self.assertIs(self.store.status_of("Alien"), Status.ENVIE)
        self.assertEqual(llm.call_count, 2)

        messages = llm.call_args_list[1][0][0]
        self.assertEqual(messages[-1]["role"], "tool")
        self.assertEqual(messages[-1]["content"], "ADDED:Alien")
        self.assertEqual(messages[-2]["tool_calls"][0]["function"]["name"], "add_to_wishlist")

    def test_llm_error_gives_apology(self):
        with patch("cinematch.core.agent.call_llm", return_value={"type": "error", "error": "LLM_CALL_FAILED"}):
            self.assertEqual(self.agent.respond("Un polar ?"), LLM_ERROR_MESSAGE)
        self.assertEqual(self.agent.history, [])

    def test_step_budget(self):
        with patch("cinematch.core.agent.call_llm", return_value=_tool_call("get_stats", {})) as llm:
            self.assertEqual(self.agent.respond("stats ?"), STUCK_MESSAGE)
        self.assertEqual(llm.call_count, 3)

    def test_history_window(self):
        with patch("cinematch.core.agent.call_llm", return_value={"type": "message", "content": "ok"}):
            for i in range(5):
                self.agent.respond(f"question {i}")

        history = self.agent.history
        self.assertEqual(len(history), 6)
        self.assertEqual(history[0], {"role": "user", "content": "question 2"})

    def test_describe_movie(self):
        with patch("cinematch.core.agent.call_llm", return_value={"type": "message", "content": "  Huis clos spatial. "}):
            self.assertEqual(self.agent.describe_movie("Alien"), "Huis clos spatial.")
        with patch("cinematch.core.agent.call_llm", return_value={"type": "error", "error": "LLM_CALL_FAILED"}):
            self.assertEqual(self.agent.describe_movie("Alien"), "")


class TestRecommendations(unittest.TestCase):
    def setUp(self):
        self.agent = MovieAgent(ListOperations(JsonListStore()), rng=random.Random(3))

    def test_recommend_from_like_adds_inspiration(self):
        reply = {
            "type": "message",
            "content": '{"title":"Inception","pitch":"Un casse onirique audacieux","year":"2010","platform":"Netflix"}',
        }
        with patch("cinematch.core.agent.call_llm", return_value=reply) as llm:
            rec = self.agent.recommend_from_like("  Interstellar ")

        self.assertEqual(rec.title, "Inception")
        self.assertIn("Un casse onirique audacieux", rec.pitch)
        self.assertIn("année suggérée : 2010", rec.pitch)
        self.assertTrue(rec.pitch.endswith("Inspiré de Interstellar"))
        self.assertEqual(rec.platform, "Netflix")
        self.assertIn("'Interstellar'", llm.call_args[0][0][1]["content"])
        self.assertNotIn("tools", llm.call_args[1])

    def test_recommend_from_like_when_llm_fails(self):
        with patch("cinematch.core.agent.call_llm", return_value={"type": "error", "error": "LLM_CALL_FAILED"}):
            rec = self.agent.recommend_from_like("Heat")

        self.assertEqual(rec.title, MYSTERY_TITLE)
        self.assertEqual(rec.pitch, "Inspiré de Heat")
        self.assertIn(rec.platform, FALLBACK_PLATFORMS)

    def test_recommend_random_from_plain_text(self):
        reply = {"type": "message", "content": "• Le Samouraï\nUn polar glacial."}
        with patch("cinematch.core.agent.call_llm", return_value=reply):
            rec = self.agent.recommend_random()

        self.assertEqual(rec.title, "Le Samouraï")
        self.assertEqual(rec.pitch, RANDOM_REASON)
        self.assertIn(rec.platform, FALLBACK_PLATFORMS)

    def test_agent_can_call_recommendation_tool(self):
        responses = [
            _tool_call("recommend_random_movie", {}),
            {"type": "message", "content": '{"title":"Heat","pitch":"Duel au sommet","platform":"StreamFiction"}'},
            {"type": "message", "content": "Regarde Heat."},
        ]
        with patch("cinematch.core.agent.call_llm", side_effect=responses) as llm:
            reply = self.agent.respond("une idée de film ?")

        self.assertEqual(reply, "Regarde Heat.")
        tool_message = llm.call_args_list[2][0][0][-1]
        self.assertEqual(tool_message["name"], "recommend_random_movie")
        self.assertEqual(
            json.loads(tool_message["content"]),
            {"title": "Heat", "pitch": "Duel au sommet", "platform": "StreamFiction"},
        )


class TestWiring(unittest.TestCase):
    def test_profile_for(self):
        self.assertEqual(profile_for("humor").name, Profile.humoristic_critic().name)
        self.assertEqual(profile_for(None).name, Profile.default_cinema_expert().name)

    def test_build_router_from_settings(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(storage_path=Path(tmp) / "storage.json", profile="critic")

            router = build_router(settings)
            router.route("Add Alien to my list")

            self.assertIsInstance(router, IntentRouter)
            self.assertIsInstance(router.agent, MovieAgent)
            self.assertEqual(router.agent.profile.name, Profile.humoristic_critic().name)
            self.assertTrue((Path(tmp) / "storage.json").exists())


if __name__ == "__main__":
    unittest.main()
