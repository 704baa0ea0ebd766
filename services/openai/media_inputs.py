"""Utilities to build input payloads for the Responses API."""

from typing import Any, Dict, List, Sequence, Tuple


def to_image_data_url(image_b64: str, mime_type: str = "image/jpeg") -> str:
    """Convert base64 image text into a data URL suitable for vision input."""
    return f"data:{mime_type or 'image/jpeg'};base64,{image_b64}"


def _text_message(role: str, text: str) -> Dict[str, Any]:
    return {"type": "message", "role": role, "content": [{"type": "input_text", "text": text}]}


def build_text_inputs(system_prompt: str, user_prompt: str) -> List[Dict[str, Any]]:
    """Build a system + user text-only input array."""
    return [_text_message("system", system_prompt), _text_message("user", user_prompt)]


def build_image_inputs(
    system_prompt: str,
    user_prompt: str,
    images: Sequence[Tuple[str, str]],
) -> List[Dict[str, Any]]:
    """Build the input array with the prompt followed by every image strip in order.

    Args:
        system_prompt: Extraction instruction.
        user_prompt: Task description for this image.
        images: `(mime_type, base64)` pairs, top strip first.
    """
    inputs = build_text_inputs(system_prompt, user_prompt)
    inputs.append(
        {
            "type": "message",
            "role": "user",
            "content": [
                {"type": "input_image", "image_url": to_image_data_url(image_b64, mime_type)}
                for mime_type, image_b64 in images
            ],
        }
    )
    return inputs
