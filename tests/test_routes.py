import base64
import io
import struct
import unittest
import zlib

from fastapi.testclient import TestClient
from PIL import Image

from main import create_app
from models.fact_models import NO_READABLE_CONTENT
from utils.settings import Settings


def _png_b64(width=60, height=120):
    out = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(out, format="PNG")
    return base64.b64encode(out.getvalue()).decode("utf-8")


def _png_chunk(kind, data):
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)


def _oversized_png_b64(width=30000, height=30000):
    """A valid PNG header that declares far more pixels than Pillow will decode."""
    raw = b"\x89PNG\r\n\x1a\n"
    raw += _png_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
    raw += _png_chunk(b"IDAT", zlib.compress(b"\x00"))
    raw += _png_chunk(b"IEND", b"")
    return base64.b64encode(raw).decode("utf-8")


class TestRoutesLocalMode(unittest.TestCase):
    def setUp(self):
        self._client_cm = TestClient(create_app(Settings()))
        self.client = self._client_cm.__enter__()

    def tearDown(self):
        self._client_cm.__exit__(None, None, None)

    def _session(self):
        response = self.client.post("/v1/sessions", json={"device_id": "phone-1"})
        self.assertEqual(response.status_code, 200)
        return response.json()["session_id"]

    def _committed_image(self, session_id):
        presign = self.client.post(
            f"/v1/sessions/{session_id}/images:presign",
            json={"filename": "chat.png", "content_type": "image/png", "size": 1024},
        )
        self.assertEqual(presign.status_code, 200)
        image_id = presign.json()["image_id"]
        self.assertTrue(presign.json()["upload_url"].endswith(image_id))

        commit = self.client.post(
            f"/v1/sessions/{session_id}/images:commit",
            json={
                "image_ids": [image_id, "stranger"],
                "meta": [{"image_id": image_id, "width": 999}],
                "payloads": [{"image_id": image_id, "mime_type": "image/png", "image_base64": _png_b64()}],
            },
        )
        self.assertEqual(commit.json(), {"accepted": [image_id], "rejected": ["stranger"]})
        return image_id

    def test_health(self):
        response = self.client.get("/healthz")
        self.assertEqual(response.json(), {"ok": True, "openai_available": False})

    def test_full_flow(self):
        session_id = self._session()
        image_id = self._committed_image(session_id)

        analysis = self.client.post(f"/v1/sessions/{session_id}/analysis", json={"image_ids": [image_id]})
        self.assertEqual(analysis.status_code, 200)
        body = analysis.json()
        self.assertEqual((body["status"], body["facts_count"]), ("done", 1))

        job = self.client.get(f"/v1/jobs/{body['job_id']}")
        self.assertEqual(job.json(), {"status": "done", "progress": 100})

        summary = self.client.get(f"/v1/sessions/{session_id}/summary").json()
        self.assertEqual(summary["highlights"], [NO_READABLE_CONTENT])

        chat = self.client.post(
            f"/v1/sessions/{session_id}/chat",
            json={"message": "how should I reply?", "context": {"image_ids": [image_id]}},
        )
        self.assertEqual(chat.status_code, 200)
        answer = chat.json()
        self.assertEqual(answer["model"], "fallback:local")
        self.assertIsNone(answer["llm_error"])
        self.assertTrue(answer["is_speculative"])
        self.assertEqual(len(answer["reply_options"]), 3)
        self.assertIn("【高情商回复候选】", answer["answer"])
        self.assertLessEqual(len(answer["citations"]), 3)

        citation = answer["citations"][0]
        evidence = self.client.get(f"/v1/sessions/{session_id}/evidences/{citation['evidenceId']}")
        self.assertEqual(evidence.status_code, 200)
        self.assertEqual(evidence.json()["fact_id"], citation["factId"])
        self.assertEqual(evidence.json()["image_id"], image_id)

        details = self.client.post(f"/v1/sessions/{session_id}/evidences:detail", json={"message": ""})
        self.assertEqual(len(details.json()["evidences"]), 1)

        messages = self.client.get(f"/v1/sessions/{session_id}/messages").json()["messages"]
        self.assertEqual([message["role"] for message in messages], ["user", "assistant"])
        self.assertEqual(messages[1]["content"], answer["answer"])

        deleted = self.client.delete(f"/v1/sessions/{session_id}")
        self.assertEqual(deleted.json(), {"ok": True, "cleanup_queued": True})
        self.assertEqual(self.client.get(f"/v1/sessions/{session_id}/summary").status_code, 404)

    def test_evidence_from_another_session_is_not_found(self):
        first = self._session()
        second = self._session()
        image_id = self._committed_image(first)
        self.client.post(f"/v1/sessions/{first}/analysis", json={"image_ids": [image_id]})
        citation = self.client.post(f"/v1/sessions/{first}/chat", json={"message": "hi"}).json()["citations"][0]

        response = self.client.get(f"/v1/sessions/{second}/evidences/{citation['evidenceId']}")
        self.assertEqual(response.status_code, 404)

    def test_errors(self):
        self.assertEqual(self.client.get("/v1/jobs/nope").status_code, 404)
        self.assertEqual(self.client.post("/v1/sessions/nope/chat", json={"message": "hi"}).status_code, 404)

        session_id = self._session()
        bad_type = self.client.post(f"/v1/sessions/{session_id}/images:presign", json={"content_type": "text/plain"})
        self.assertEqual(bad_type.status_code, 400)
        empty = self.client.post(f"/v1/sessions/{session_id}/analysis", json={"image_ids": []})
        self.assertEqual(empty.status_code, 400)

    def test_invalid_payload_rejected_at_commit(self):
        session_id = self._session()
        image_id = self.client.post(f"/v1/sessions/{session_id}/images:presign", json={}).json()["image_id"]
        commit = self.client.post(
            f"/v1/sessions/{session_id}/images:commit",
            json={"image_ids": [image_id], "payloads": [{"image_id": image_id, "image_base64": "%%%"}]},
        )
        self.assertEqual(commit.json(), {"accepted": [], "rejected": [image_id]})

    def test_oversized_image_rejected_without_failing_the_batch(self):
        session_id = self._session()
        good, huge = (
            self.client.post(f"/v1/sessions/{session_id}/images:presign", json={}).json()["image_id"] for _ in range(2)
        )
        commit = self.client.post(
            f"/v1/sessions/{session_id}/images:commit",
            json={
                "image_ids": [good, huge],
                "payloads": [
                    {"image_id": good, "mime_type": "image/png", "image_base64": _png_b64()},
                    {"image_id": huge, "mime_type": "image/png", "image_base64": _oversized_png_b64()},
                ],
            },
        )
        self.assertEqual(commit.status_code, 200)
        self.assertEqual(commit.json(), {"accepted": [good], "rejected": [huge]})

        analysis = self.client.post(f"/v1/sessions/{session_id}/analysis", json={"image_ids": [good]})
        self.assertEqual(analysis.status_code, 200)
        rejected = self.client.post(f"/v1/sessions/{session_id}/analysis", json={"image_ids": [huge]})
        self.assertEqual(rejected.status_code, 400)


if __name__ == "__main__":
    unittest.main()
