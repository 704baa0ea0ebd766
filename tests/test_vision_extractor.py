import asyncio
import base64
import io
import json
import unittest
from types import SimpleNamespace

import httpx
import openai
from PIL import Image

from models.errors import ProviderInvalidOutput, ProviderRateLimited, ProviderTimeout
from services.image_slices import ImageStripper
from services.openai.vision_extractor import VisionExtractor


class _FakeResponses:
    def __init__(self, behaviors, delay=0.0):
        self.behaviors = list(behaviors)
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        behavior = self.behaviors.pop(0) if self.behaviors else "{}"
        if isinstance(behavior, Exception):
            raise behavior
        return SimpleNamespace(output_text=behavior, output=[], usage=None)


def _client(behaviors, delay=0.0):
    return SimpleNamespace(responses=_FakeResponses(behaviors, delay))


def _rate_limit_error():
    request = httpx.Request("POST", "https://api.example/v1/responses")
    return openai.RateLimitError("slow down", response=httpx.Response(429, request=request), body=None)


def _png_b64(width, height, bottom_band=0):
    img = Image.new("RGB", (width, height), "white")
    if bottom_band:
        img.paste((0, 0, 0), (0, height - bottom_band, width, height))
    out = io.BytesIO()
    img.save(out, format="PNG")
    return base64.b64encode(out.getvalue()).decode("utf-8")


GOOD = json.dumps({"messages": [{"text": "hi", "side": "left", "order": 0}], "entities": ["Friday"]})


class TestVisionExtractor(unittest.IsolatedAsyncioTestCase):
    async def test_parses_json_wrapped_in_prose(self):
        client = _client([f"Sure, here it is:\n{GOOD}\nDone."])
        result = await VisionExtractor(client).extract("aGVsbG8=", "image/png")

        self.assertEqual([(m.text, m.side) for m in result.messages], [("hi", "left")])
        self.assertEqual(result.entities, ["Friday"])
        self.assertEqual(client.responses.calls[0]["text"], {"format": {"type": "json_object"}})

    async def test_invalid_output_retried_once(self):
        client = _client(["not json", GOOD])
        result = await VisionExtractor(client).extract("aGVsbG8=", "image/png")

        self.assertEqual(len(client.responses.calls), 2)
        self.assertEqual(result.messages[0].text, "hi")

    async def test_invalid_output_twice_raises(self):
        client = _client(["nope", "[1, 2]", GOOD])
        with self.assertRaises(ProviderInvalidOutput):
            await VisionExtractor(client).extract("aGVsbG8=", "image/png")
        self.assertEqual(len(client.responses.calls), 2)

    async def test_rate_limit_not_retried(self):
        client = _client([_rate_limit_error(), GOOD])
        with self.assertRaises(ProviderRateLimited) as ctx:
            await VisionExtractor(client).extract("aGVsbG8=", "image/png")
        self.assertEqual(len(client.responses.calls), 1)
        self.assertEqual(ctx.exception.classification, "请求过多（限流），已降级本地")

    async def test_timeout(self):
        client = _client([GOOD], delay=0.2)
        with self.assertRaises(ProviderTimeout):
            await VisionExtractor(client, timeout=0.01).extract("aGVsbG8=", "image/png")

    async def test_tall_image_sent_as_strips(self):
        stripper = ImageStripper(slice_height=100, overlap_ratio=0.1)
        client = _client([GOOD])
        await VisionExtractor(client, stripper=stripper).extract(_png_b64(40, 250), "image/png")

        content = client.responses.calls[0]["input"][-1]["content"]
        images = [part for part in content if part.get("type") == "input_image"]
        self.assertEqual(len(images), 3)
        self.assertTrue(all(part["image_url"].startswith("data:image/jpeg;base64,") for part in images))

    async def test_long_image_split_across_requests_keeps_order(self):
        stripper = ImageStripper(slice_height=100, overlap_ratio=0.0, max_strips=4)
        replies = [
            json.dumps({"messages": [{"text": text, "side": "left", "order": 0}], "entities": [entity]})
            for text, entity in (("top", "Friday"), ("middle", "Friday"), ("bottom", "Sunday"))
        ]
        client = _client(replies)
        result = await VisionExtractor(client, stripper=stripper).extract(_png_b64(40, 1000), "image/png")

        calls = client.responses.calls
        self.assertEqual(len(calls), 3)
        image_counts = [
            len([part for part in call["input"][-1]["content"] if part.get("type") == "input_image"]) for call in calls
        ]
        self.assertEqual(image_counts, [4, 4, 2])
        self.assertIn("第3/3部分", calls[2]["input"][1]["content"][0]["text"])
        self.assertEqual([(m.text, m.order) for m in result.messages], [("top", 0), ("middle", 1), ("bottom", 2)])
        self.assertEqual(result.entities, ["Friday", "Sunday"])


class TestImageStripper(unittest.TestCase):
    def test_short_image_passed_through(self):
        image_b64 = _png_b64(40, 80)
        self.assertEqual(ImageStripper(100, 0.1).strips(image_b64, "image/png"), [("image/png", image_b64)])

    def test_every_strip_kept_down_to_the_bottom_edge(self):
        strips = ImageStripper(100, 0.0, max_strips=2).strips(_png_b64(40, 1000, bottom_band=20), "image/png")

        self.assertEqual(len(strips), 10)
        last = Image.open(io.BytesIO(base64.b64decode(strips[-1][1])))
        self.assertEqual(last.size, (40, 100))
        self.assertLess(sum(last.getpixel((20, 95))), 100)
        first = Image.open(io.BytesIO(base64.b64decode(strips[0][1])))
        self.assertGreater(sum(first.getpixel((20, 95))), 600)

    def test_batches_group_strips_per_request(self):
        batches = ImageStripper(100, 0.1, max_strips=8).batches(_png_b64(40, 2000), "image/png")
        self.assertEqual([len(batch) for batch in batches], [8, 8, 7])

    def test_short_image_is_a_single_batch(self):
        image_b64 = _png_b64(40, 80)
        self.assertEqual(ImageStripper(100, 0.1).batches(image_b64, "image/png"), [[("image/png", image_b64)]])

    def test_max_strips_must_be_positive(self):
        with self.assertRaises(ValueError):
            ImageStripper(100, 0.1, max_strips=0)

    def test_oversized_image_passed_through(self):
        image_b64 = _png_b64(40, 250)
        original = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = 100
        try:
            strips = ImageStripper(100, 0.1).strips(image_b64, "image/png")
        finally:
            Image.MAX_IMAGE_PIXELS = original
        self.assertEqual(strips, [("image/png", image_b64)])

    def test_undecodable_image_passed_through(self):
        self.assertEqual(ImageStripper(100, 0.1).strips("aGVsbG8=", "image/heic"), [("image/heic", "aGVsbG8=")])


if __name__ == "__main__":
    unittest.main()
