"""Translate core errors into HTTP responses."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from models.errors import NotFound, ValidationError


@contextmanager
def core_errors() -> Iterator[None]:
	"""Raise NotFound as 404 and ValidationError as 400; let anything else through."""
	try:
		yield
	except NotFound as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except ValidationError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
