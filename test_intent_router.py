import unittest
from unittest.mock import MagicMock, patch

from cinematch.agents.intent_router import (
    AGENT_FAILURE_MESSAGE,
    EMPTY_UTTERANCE_MESSAGE,
    ROUTER_FAILURE_MESSAGE,
    UNKNOWN_CLEAR_TARGET_MESSAGE,
    IntentRouter,
)
from cinematch.models.intent import IntentKind
from cinematch.models.status import Status
from cinematch.services.list_operations import ListOperations
from cinematch.services.list_store import JsonListStore


class IntentRouterTestCase(unittest.TestCase):
    def setUp(self):
        self.store = JsonListStore()
        self.ops = ListOperations(self.store)
        self.agent = MagicMock()
        self.agent.respond.return_value = "agent reply"
        self.router = IntentRouter(self.ops, self.agent)


class TestClearTiers(IntentRouterTestCase):
    def test_clear_all_in_seen(self):
        self.ops.mark_seen("Heat")
        self.ops.mark_seen("Drive")
        self.ops.add("Alien")

        reply = self.router.route("clear all in seen")

        self.assertEqual(reply, "Removed 2 movies from “already seen”.")
        self.assertEqual(self.store.by_status(Status.DEJA_VU), [])
        self.assertIs(self.store.status_of("Alien"), Status.ENVIE)
        self.agent.respond.assert_not_called()

    def test_clear_all_french(self):
        self.ops.add("Alien")
        self.assertEqual(self.router.route("supprime tout dans envie"), "Removed 1 movie from “wishlist”.")

    def test_clear_all_unknown_target_does_not_mutate(self):
        self.ops.add("Alien")

        reply = self.router.route("clear all in tomorrow")

        self.assertEqual(reply, UNKNOWN_CLEAR_TARGET_MESSAGE)
        self.assertEqual(len(self.store), 1)
        self.agent.respond.assert_not_called()

    def test_clear_all_beats_direct_remove(self):
        self.ops.add("Alien, Heat")

        reply = self.router.route("remove all in wishlist")

        self.assertEqual(reply, "Removed 2 movies from “wishlist”.")
        self.assertIsNone(self.store.status_of("all in wishlist"))

    def test_legacy_clears(self):
        self.ops.add("Alien")
        self.ops.mark_disliked("Heat")
        self.ops.mark_seen("Drive")

        self.assertEqual(self.router.route("vide la liste d'envie"), "Removed 1 movie from “wishlist”.")
        self.assertEqual(self.router.route("clear not interested"), "Removed 1 movie from “not interested”.")
        self.assertEqual(self.router.route("clear already seen"), "Removed 1 movie from “already seen”.")
        self.assertEqual(self.router.route("clear the wishlist"), "Nothing to remove from “wishlist”.")
        self.assertEqual(len(self.store), 0)


class TestBulkAddTier(IntentRouterTestCase):
    def test_bulk_add_to_wishlist(self):
        reply = self.router.route("Add Alien, Heat, Drive to my wishlist")

        self.assertTrue(reply.endswith("(3)"))
        self.assertIn("Alien, Heat, Drive", reply)
        for title in ("Alien", "Heat", "Drive"):
            self.assertIs(self.store.status_of(title), Status.ENVIE)

    def test_bulk_add_french(self):
        reply = self.router.route("ajoute Alien, Heat dans ma liste d'envie")
        self.assertTrue(reply.endswith("(2)"))
        self.assertEqual(sorted(self.store.by_status(Status.ENVIE)), ["Alien", "Heat"])

    def test_unusable_titles_fall_through_to_agent(self):
        reply = self.router.route('Add "", ""')

        self.assertEqual(reply, "agent reply")
        self.assertEqual(len(self.store), 0)
        self.agent.respond.assert_called_once_with('Add "", ""', request_id=None)


class TestDirectActionTier(IntentRouterTestCase):
    def test_not_interested(self):
        reply = self.router.route("I'm not interested in Matrix")

        self.assertIn("Matrix", reply)
        self.assertIs(self.store.status_of("Matrix"), Status.PAS_INTERESSE)

    def test_french_dislike(self):
        self.router.route("je n'aime pas Titanic")
        self.assertIs(self.store.status_of("Titanic"), Status.PAS_INTERESSE)

    def test_seen_variants(self):
        self.assertEqual(self.router.route("I've seen Heat"), "“Heat” marked as already seen.")
        self.router.route("j'ai vu Drive")
        self.router.route("mark Alien as seen")
        for title in ("Heat", "Drive", "Alien"):
            self.assertIs(self.store.status_of(title), Status.DEJA_VU)

    def test_add_single(self):
        self.assertEqual(self.router.route("Add Alien to my list"), "“Alien” added to your wishlist.")
        self.router.route("ajoute Drive dans ma liste")
        self.assertIs(self.store.status_of("Drive"), Status.ENVIE)

    def test_remove_from_list(self):
        self.ops.add("Heat")
        self.assertEqual(self.router.route("remove Heat from my wishlist"), "“Heat” removed from your wishlist.")
        self.assertIs(self.store.status_of("Heat"), Status.PAS_INTERESSE)

    def test_remove_solo(self):
        self.router.route("delete Heat")
        self.router.route("delete alligator")
        self.assertIs(self.store.status_of("Heat"), Status.PAS_INTERESSE)
        self.assertIs(self.store.status_of("alligator"), Status.PAS_INTERESSE)

    def test_remove_everything_is_delegated(self):
        self.ops.add("Alien")

        self.assertEqual(self.router.route("remove everything"), "agent reply")
        self.assertIsNone(self.store.status_of("everything"))
        self.assertIs(self.store.status_of("Alien"), Status.ENVIE)


class TestDelegation(IntentRouterTestCase):
    def test_multi_action_goes_to_agent_untouched(self):
        reply = self.router.route("add Alien and remove Heat")

        self.assertEqual(reply, "agent reply")
        self.agent.respond.assert_called_once_with("add Alien and remove Heat", request_id=None)
        self.assertEqual(len(self.store), 0)

    def test_free_question_goes_to_agent(self):
        self.assertEqual(self.router.route("Recommend me a thriller"), "agent reply")
        self.agent.respond.assert_called_once_with("Recommend me a thriller", request_id=None)

    def test_agent_failure_becomes_apology(self):
        self.agent.respond.side_effect = RuntimeError("timeout")
        self.assertEqual(self.router.route("Recommend me a thriller"), AGENT_FAILURE_MESSAGE)

    def test_agent_none_reply(self):
        self.agent.respond.return_value = None
        self.assertEqual(self.router.route("Recommend me a thriller"), "")

    def test_request_id_reaches_agent(self):
        self.router.route("Recommend me a thriller", request_id="req-42")
        self.agent.respond.assert_called_once_with("Recommend me a thriller", request_id="req-42")

    def test_request_id_on_unknown_clear_target_log(self):
        with patch("cinematch.agents.intent_router.log_warn") as warn:
            self.router.route("clear all in tomorrow", request_id="req-7")

        warn.assert_called_once()
        self.assertEqual(warn.call_args.kwargs["request_id"], "req-7")
        self.assertEqual(warn.call_args.kwargs["tail"], "tomorrow")

    def test_blank_utterance(self):
        self.assertEqual(self.router.route("   "), EMPTY_UTTERANCE_MESSAGE)
        self.assertEqual(self.router.route(None), EMPTY_UTTERANCE_MESSAGE)
        self.agent.respond.assert_not_called()


class TestRouterStructure(IntentRouterTestCase):
    def test_tier_order(self):
        self.assertEqual(
            [tier.name for tier in self.router.tiers],
            ["clear_all_generic", "clear_specific", "multi_action", "bulk_add", "direct_action", "delegate"],
        )

    def test_classify_has_no_side_effects(self):
        intent = self.router.classify("Add Alien, Heat")

        self.assertIs(intent.kind, IntentKind.BULK_ADD)
        self.assertEqual(intent.titles, ["Alien", "Heat"])
        self.assertEqual(len(self.store), 0)

    def test_classify_unknown_clear_target(self):
        intent = self.router.classify("clear all in tomorrow")
        self.assertIs(intent.kind, IntentKind.CLEAR_ALL_GENERIC)
        self.assertIsNone(intent.status)

    def test_handler_exception_becomes_apology(self):
        ops = MagicMock()
        ops.clear.side_effect = RuntimeError("disk full")
        router = IntentRouter(ops, self.agent)

        self.assertEqual(router.route("clear the wishlist"), ROUTER_FAILURE_MESSAGE)


if __name__ == "__main__":
    unittest.main()
