import unittest

from models.errors import ProviderInvalidOutput
from models.fact_models import NO_READABLE_CONTENT
from models.provider_payloads import OcrPayload, decode_payload
from services.fact_builder import EMOTION_PREFIX, build_facts
from services.ocr_normalizer import merge_ocr_results, normalize_ocr
from services.providers import OcrMessage, OcrResult


class TestNormalizeOcr(unittest.TestCase):
    def test_messages_cleaned_and_sorted(self):
        payload = decode_payload(
            {
                "messages": [
                    {"text": "second", "side": "RIGHT", "order": 1},
                    {"text": "   ", "side": "left", "order": 2},
                    {"text": "first", "side": "middle", "order": 0},
                    {"text": 42, "side": "left"},
                    "not a message",
                ],
                "entities": ["Acme", "", None],
            },
            OcrPayload,
        )
        result = normalize_ocr(payload, model="gpt-4o-mini")

        self.assertEqual(
            [(m.text, m.side, m.order) for m in result.messages],
            [("first", "unknown", 0), ("second", "right", 1), ("42", "left", 3)],
        )
        self.assertEqual(result.entities, ["Acme"])
        self.assertEqual(result.model, "gpt-4o-mini")

    def test_transcript_lines_used_when_no_messages(self):
        payload = decode_payload({"messages": [], "transcript_lines": ["hello", "there"]}, OcrPayload)
        result = normalize_ocr(payload)

        self.assertEqual([(m.text, m.side, m.order) for m in result.messages], [("hello", "unknown", 0), ("there", "unknown", 1)])

    def test_non_object_payload_is_invalid_output(self):
        with self.assertRaises(ProviderInvalidOutput):
            decode_payload(["messages"], OcrPayload)

    def test_merge_continues_order_across_parts(self):
        first = OcrResult(
            messages=[OcrMessage("a", "left", 0), OcrMessage("b", "right", 3)],
            transcript_lines=["a", "b"],
            entities=["Friday"],
        )
        empty = OcrResult()
        last = OcrResult(
            messages=[OcrMessage("c", "left", 0), OcrMessage("d", "unknown", 1)],
            entities=["Friday", "cafe"],
            emotion_cues=["tired"],
            model="gpt-4o-mini",
        )

        merged = merge_ocr_results([first, empty, last])

        self.assertEqual([(m.text, m.order) for m in merged.messages], [("a", 0), ("b", 3), ("c", 4), ("d", 5)])
        self.assertEqual(merged.transcript_lines, ["a", "b"])
        self.assertEqual(merged.entities, ["Friday", "cafe"])
        self.assertEqual(merged.emotion_cues, ["tired"])
        self.assertEqual(merged.model, "gpt-4o-mini")

    def test_merge_single_part_unchanged(self):
        only = OcrResult(messages=[OcrMessage("a", "left", 7)])
        self.assertIs(merge_ocr_results([only]), only)


class TestBuildFacts(unittest.TestCase):
    def test_nothing_read_gives_single_placeholder(self):
        for ocr in (None, OcrResult()):
            facts = build_facts("s1", "img-1", ocr)
            self.assertEqual(len(facts), 1)
            self.assertEqual(facts[0].text, NO_READABLE_CONTENT)
            self.assertEqual(facts[0].confidence, 0.3)
            self.assertTrue(facts[0].is_placeholder)

    def test_messages_entities_and_cues(self):
        ocr = OcrResult(
            messages=[OcrMessage("hi", "left", 0), OcrMessage("hello", "right", 1), OcrMessage("?", "unknown", 2)],
            entities=["Friday"],
            emotion_cues=["impatient"],
        )
        facts = build_facts("s1", "img-1", ocr)

        self.assertEqual([fact.speaker_role for fact in facts[:3]], ["other", "self", "unknown"])
        self.assertTrue(all(fact.confidence == 0.9 for fact in facts[:3]))
        self.assertLess(facts[0].bbox.x, facts[1].bbox.x)
        self.assertLess(facts[0].bbox.y, facts[1].bbox.y)

        entity, cue = facts[3], facts[4]
        self.assertEqual((entity.type, entity.text, entity.confidence), ("entity", "Friday", 0.78))
        self.assertEqual(cue.text, f"{EMOTION_PREFIX}impatient")
        self.assertEqual(cue.confidence, 0.74)
        self.assertGreater(entity.order, facts[2].order)

    def test_caps(self):
        ocr = OcrResult(
            messages=[OcrMessage(f"m{i}", "left", i) for i in range(40)],
            entities=[f"e{i}" for i in range(10)],
            emotion_cues=[f"c{i}" for i in range(10)],
        )
        facts = build_facts("s1", "img-1", ocr)

        self.assertEqual(len([f for f in facts if f.type == "paragraph"]), 30)
        self.assertEqual(len(facts), 30 + 8 + 6)
        self.assertTrue(all(0 <= f.bbox.y <= 0.9 for f in facts[:30]))


if __name__ == "__main__":
    unittest.main()
