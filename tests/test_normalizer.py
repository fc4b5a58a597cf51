import unittest
from unittest import mock

from upscquiz.bank.normalizer import extract_correct, normalize, normalize_with_report, parse_index
from upscquiz.bank.schema import DEFAULT_EXPLANATION, MISSING_TEXT, Question, QuestionMeta


RICH_ITEM = {
    "id": "polity_001",
    "question_text": "  Which Article deals with the Finance Commission?  ",
    "text": "ignored generic text",
    "options": ["Article 280", "Article 275", "Article 300", "Article 356"],
    "correct_option_index": "0",
    "explanation": "Article 280 provides for the Finance Commission.",
    "source": {"exam": "UPSC_Prelims", "year": 2019},
    "difficulty": "Easy",
    "topic": "Polity",
    "subtopic": "Constitutional bodies",
    "tags": ["finance", "fiscal federalism"],
    "linked_concepts": ["Article 280"],
}


class NormalizeShapeTests(unittest.TestCase):
    def test_accepts_list_wrapped_and_single_record(self) -> None:
        self.assertEqual(len(normalize([RICH_ITEM, RICH_ITEM])), 2)
        self.assertEqual(len(normalize({"questions": [RICH_ITEM]})), 1)
        single = normalize(RICH_ITEM)
        self.assertEqual(len(single), 1)
        self.assertEqual(single[0].id, "polity_001")

    def test_empty_inputs_yield_empty_list(self) -> None:
        for raw in (None, [], {}, {"questions": []}, {"questions": None}, "nonsense", 42):
            self.assertEqual(normalize(raw), [], raw)

    def test_rich_item_fields(self) -> None:
        (q,) = normalize([RICH_ITEM])
        self.assertEqual(q.text, "Which Article deals with the Finance Commission?")
        self.assertEqual(q.correct, 0)
        self.assertEqual(q.metadata.year, "2019")
        self.assertEqual(q.metadata.exam, "UPSC Prelims")
        self.assertEqual(q.metadata.tags, frozenset({"finance", "fiscal federalism"}))
        self.assertEqual(q.metadata.concepts, frozenset({"Article 280"}))
        self.assertFalse(q.synthetic_id)

    def test_year_is_always_a_string(self) -> None:
        with mock.patch("upscquiz.bank.normalizer._warn"):
            (a, b, c) = normalize([{"text": "x", "year": 2021}, {"text": "y", "year": "2020"}, {"text": "z"}])
        self.assertEqual((a.metadata.year, b.metadata.year, c.metadata.year), ("2021", "2020", "N/A"))

    def test_missing_everything_is_fully_defaulted(self) -> None:
        with mock.patch("upscquiz.bank.normalizer._warn"):
            (q,) = normalize([{"unrelated": True}])
        self.assertEqual(q.text, MISSING_TEXT)
        self.assertEqual(q.options, [])
        self.assertEqual(q.correct, 0)
        self.assertEqual(q.explanation, DEFAULT_EXPLANATION)
        self.assertEqual(q.metadata, QuestionMeta())
        self.assertEqual(q.notes, "")
        self.assertTrue(q.synthetic_id)
        self.assertTrue(q.id.startswith("upsc_"))
        for value in vars(q).values():
            self.assertIsNotNone(value)

    def test_wrong_shapes_are_coerced(self) -> None:
        with mock.patch("upscquiz.bank.normalizer._warn"):
            (q,) = normalize([{"text": "t", "options": "A,B", "tags": "x", "linked_concepts": {"a": 1}}])
        self.assertEqual(q.options, [])
        self.assertEqual(q.metadata.tags, frozenset())
        self.assertEqual(q.metadata.concepts, frozenset())

    def test_synthetic_ids_are_unique_within_one_pass(self) -> None:
        with mock.patch("upscquiz.bank.normalizer._warn"):
            qs = normalize([{"text": "a"}, {"text": "b"}, {"text": "c", "id": ""}])
        ids = [q.id for q in qs]
        self.assertEqual(len(set(ids)), 3)
        self.assertTrue(all(q.synthetic_id for q in qs))

    def test_bad_item_is_dropped_not_fatal(self) -> None:
        with mock.patch("upscquiz.bank.normalizer._warn") as warn:
            qs, dropped = normalize_with_report([RICH_ITEM, "not a record", None, RICH_ITEM])
        self.assertEqual(len(qs), 2)
        self.assertEqual(dropped, 2)
        self.assertTrue(warn.called)

    def test_canonical_list_keeps_shape(self) -> None:
        first = normalize([RICH_ITEM, dict(RICH_ITEM, id="polity_002", correct_option_index=3)])
        again = normalize([q.to_dict() for q in first])
        self.assertEqual(len(again), len(first))
        for a, b in zip(first, again):
            self.assertEqual(a.text, b.text)
            self.assertEqual(a.options, b.options)
            self.assertEqual(a.correct, b.correct)
            self.assertEqual(a.explanation, b.explanation)
            self.assertEqual(a.metadata, b.metadata)

    def test_round_trip_through_dict(self) -> None:
        (q,) = normalize([RICH_ITEM])
        self.assertEqual(Question.from_dict(q.to_dict()), q)


class ExtractCorrectTests(unittest.TestCase):
    def test_numeric_index_beats_label(self) -> None:
        self.assertEqual(extract_correct({"correct_option_index": 1, "correct_option_label": "D"}), 1)

    def test_generic_correct_field(self) -> None:
        self.assertEqual(extract_correct({"correct": "2"}), 2)

    def test_negative_or_unparseable_index_falls_through(self) -> None:
        self.assertEqual(extract_correct({"correct_option_index": -1, "correct": 3}), 3)
        self.assertEqual(extract_correct({"correct_option_index": "abc", "correct_option_label": "b"}), 1)

    def test_label_only(self) -> None:
        self.assertEqual(extract_correct({"correct_option_label": "C"}), 2)
        self.assertEqual(extract_correct({"correct_option_label": " d "}), 3)

    def test_fallback_defaults_to_zero_with_diagnostic(self) -> None:
        with mock.patch("upscquiz.bank.normalizer._warn") as warn:
            self.assertEqual(extract_correct({"id": "q9", "correct_option_label": "E"}), 0)
        warn.assert_called_once()

    def test_parse_index(self) -> None:
        self.assertEqual(parse_index(" 3 "), 3)
        self.assertEqual(parse_index(2.0), 2)
        self.assertEqual(parse_index("1st"), 1)
        self.assertIsNone(parse_index(True))
        self.assertIsNone(parse_index(""))
        self.assertIsNone(parse_index(-2))
        self.assertIsNone(parse_index(float("nan")))


if __name__ == "__main__":
    unittest.main()
