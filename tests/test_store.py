import errno
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from upscquiz.engine.scoring import score_answers
from upscquiz.storage.store import Store

from helpers import make_bank, make_question


def mistake(i: int, user_ans: int = 1) -> dict:
    entry = make_question(i).to_dict()
    entry["userAns"] = user_ans
    return entry


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "store.json"
        self.store = Store(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def read_raw(self) -> dict:
        return json.loads(self.path.read_text(encoding="utf-8"))


class KeyValueTests(StoreTestCase):
    def test_missing_file_gives_fallback(self) -> None:
        self.assertEqual(self.store.get("anything", "dflt"), "dflt")
        self.assertEqual(self.store.history(), [])

    def test_values_are_namespaced_json_strings(self) -> None:
        self.assertTrue(self.store.set("settings", {"theme": "dark"}))
        raw = self.read_raw()
        self.assertEqual(json.loads(raw["upsc_settings"]), {"theme": "dark"})
        self.assertEqual(self.store.settings(), {"theme": "dark"})

    def test_corrupt_file_and_value_fall_back(self) -> None:
        self.path.write_text("not json at all", encoding="utf-8")
        with mock.patch("upscquiz.storage.store._warn"):
            self.assertEqual(self.store.history(), [])
        self.path.write_text(json.dumps({"upsc_history": "{{broken"}), encoding="utf-8")
        with mock.patch("upscquiz.storage.store._warn"):
            self.assertEqual(self.store.get("history", "fb"), "fb")

    def test_clear_all_keeps_foreign_keys(self) -> None:
        self.path.write_text(json.dumps({"other_app_token": "\"keep me\""}), encoding="utf-8")
        self.store.set("history", [{"id": "x"}])
        self.store.mark_visited()
        self.assertTrue(self.store.clear_all())
        raw = self.read_raw()
        self.assertEqual(raw, {"other_app_token": "\"keep me\""})
        self.assertFalse(self.store.visited())

    def test_session_round_trip(self) -> None:
        self.assertIsNone(self.store.load_session())
        self.store.save_session({"currentIdx": 3})
        self.assertEqual(self.store.load_session(), {"currentIdx": 3})
        self.store.clear_session()
        self.assertIsNone(self.store.load_session())


class HistoryTests(StoreTestCase):
    def test_results_are_prepended_and_capped(self) -> None:
        bank = make_bank(2)
        ids = []
        for i in range(51):
            result = score_answers(bank, {0: 0}, paper="gs1", subject=f"s{i}")
            ids.append(self.store.save_result(result))
        history = self.store.history()
        self.assertEqual(len(history), 50)
        self.assertEqual(history[0]["subject"], "s50")
        self.assertEqual(history[-1]["subject"], "s1")
        self.assertEqual(len(set(ids)), 51)
        self.assertTrue(history[0]["id"].startswith("result_"))
        self.assertIn("savedAt", history[0])

    def test_malformed_result_is_refused(self) -> None:
        bad = {"score": -1, "correct": 1, "wrong": 0, "skipped": 0, "attempted": 1,
               "accuracy": 100, "total": 1, "paper": "gs1"}
        with mock.patch("upscquiz.storage.store._warn"):
            self.assertIsNone(self.store.save_result(bad))
        inconsistent = dict(bad, score=2.0, attempted=3)
        with mock.patch("upscquiz.storage.store._warn"):
            self.assertIsNone(self.store.save_result(inconsistent))
        self.assertEqual(self.store.history(), [])


class MistakeTests(StoreTestCase):
    def test_newest_first_and_deduplicated_by_text(self) -> None:
        self.store.save_mistakes([mistake(1), mistake(2)])
        self.store.save_mistakes([mistake(1, user_ans=3), mistake(3)])
        bank = self.store.mistakes()
        self.assertEqual([m["id"] for m in bank], ["q1", "q3", "q2"])
        self.assertEqual(bank[0]["userAns"], 3)

    def test_same_text_different_id_stored_once(self) -> None:
        other = mistake(1)
        other["id"] = "another_id"
        self.store.save_mistakes([mistake(1), other])
        bank = self.store.mistakes()
        self.assertEqual(len(bank), 1)
        self.assertEqual(bank[0]["id"], "q1")

    def test_capped(self) -> None:
        store = Store(self.path, mistakes_cap=5)
        store.save_mistakes([mistake(i) for i in range(8)])
        self.assertEqual(len(store.mistakes()), 5)


class QuotaTests(StoreTestCase):
    def seed_history(self, n: int) -> None:
        Store(self.path).set("history", [{"id": f"r{i}", "pad": "x" * 1000} for i in range(n)])

    def test_quota_trims_history_then_retries(self) -> None:
        self.seed_history(30)
        small = Store(self.path, quota_bytes=20000)
        with mock.patch("upscquiz.storage.store._warn"):
            self.assertTrue(small.set("settings", {"theme": "dark"}))
        history = small.history()
        self.assertEqual(len(history), 10)
        self.assertEqual(history[0]["id"], "r0")
        self.assertEqual(small.settings()["theme"], "dark")

    def test_unrecoverable_quota_returns_false(self) -> None:
        self.seed_history(30)
        tiny = Store(self.path, quota_bytes=100)
        with mock.patch("upscquiz.storage.store._warn"):
            self.assertFalse(tiny.set("settings", {"theme": "dark"}))
        self.assertEqual(len(Store(self.path).history()), 30)

    def test_disk_full_is_treated_as_quota(self) -> None:
        full = OSError(errno.ENOSPC, "No space left on device")
        with mock.patch("upscquiz.storage.store.os.replace", side_effect=full):
            with mock.patch("upscquiz.storage.store._warn"):
                self.assertFalse(self.store.set("settings", {"theme": "dark"}))
        self.assertFalse(self.path.exists())


if __name__ == "__main__":
    unittest.main()
