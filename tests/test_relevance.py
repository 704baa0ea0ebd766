import unittest

from models.fact_models import BoundingBox, Fact
from services.relevance import (
    SubstringRelevanceScorer,
    TokenOverlapRelevanceScorer,
    build_scorer,
    jaccard,
)


def _facts(texts, confidences=None):
    confidences = confidences or [0.9] * len(texts)
    return [
        Fact(
            id=f"f{index}",
            session_id="s1",
            image_id="img-1",
            type="paragraph",
            text=text,
            bbox=BoundingBox(0.1, 0.1, 0.5, 0.03),
            confidence=confidence,
            order=index,
        )
        for index, (text, confidence) in enumerate(zip(texts, confidences))
    ]


class TestSubstringScorer(unittest.TestCase):
    def setUp(self):
        self.scorer = SubstringRelevanceScorer()
        self.facts = _facts(["Meet at 5pm", "See you at the station", "ok", "sure", "bye", "later", "deal"])

    def test_matches_case_insensitively(self):
        selected = self.scorer.select(self.facts, "MEET")
        self.assertEqual([fact.id for fact in selected], ["f0"])

    def test_empty_question_returns_first_five(self):
        self.assertEqual(len(self.scorer.select(self.facts, "  ")), 5)

    def test_no_match_falls_back_to_first_five(self):
        selected = self.scorer.select(self.facts, "how should I reply?")
        self.assertEqual([fact.id for fact in selected], ["f0", "f1", "f2", "f3", "f4"])

    def test_never_empty_for_non_empty_facts(self):
        for question in ("", "zzz", "ok", "at"):
            self.assertTrue(self.scorer.select(self.facts[:1], question))

    def test_empty_facts_give_empty_selection(self):
        self.assertEqual(self.scorer.select([], "anything"), [])


class TestTokenOverlapScorer(unittest.TestCase):
    def test_jaccard(self):
        self.assertAlmostEqual(jaccard("a b c", "b c d"), 0.5)
        self.assertEqual(jaccard("", "a"), 0.0)

    def test_ranks_by_overlap(self):
        facts = _facts(["see you at the station", "at the station now", "unrelated words here"])
        selected = TokenOverlapRelevanceScorer().select(facts, "at the station")

        self.assertEqual([fact.id for fact in selected], ["f1", "f0"])

    def test_no_overlap_returns_highest_confidence(self):
        facts = _facts(["a", "b", "c", "d", "e", "f"], [0.1, 0.9, 0.5, 0.3, 0.8, 0.2])
        selected = TokenOverlapRelevanceScorer().select(facts, "zzz")

        self.assertEqual([fact.id for fact in selected], ["f1", "f4", "f2", "f3", "f5"])


class TestBuildScorer(unittest.TestCase):
    def test_known_strategies(self):
        self.assertIsInstance(build_scorer("substring"), SubstringRelevanceScorer)
        self.assertIsInstance(build_scorer("token_overlap"), TokenOverlapRelevanceScorer)

    def test_unknown_strategy(self):
        with self.assertRaises(ValueError):
            build_scorer("embedding")


if __name__ == "__main__":
    unittest.main()
