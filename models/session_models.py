"""Session, chat message, and analysis job records."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SESSION_ACTIVE = "active"
SESSION_DELETED = "deleted"

JOB_PENDING = "pending"
JOB_RUNNING = "running"
JOB_DONE = "done"
JOB_FAILED = "failed"


@dataclass
class Session:
	"""A client conversation-analysis session. Owns images, jobs, facts, messages."""

	id: str
	device_id: str
	status: str = SESSION_ACTIVE
	created_at: float = field(default_factory=lambda: time.time())
	updated_at: float = field(default_factory=lambda: time.time())


@dataclass
class ChatMessage:
	"""One stored chat turn entry (user question or rendered assistant answer)."""

	id: str
	session_id: str
	role: str
	content: str
	created_at: float = field(default_factory=lambda: time.time())

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"role": self.role,
			"content": self.content,
			"created_at": self.created_at,
		}


@dataclass
class AnalysisJob:
	"""Status record for one analysis invocation."""

	id: str
	session_id: str
	image_ids: List[str]
	status: str = JOB_PENDING
	progress: int = 0
	error_code: Optional[str] = None
	started_at: Optional[float] = None
	finished_at: Optional[float] = None
