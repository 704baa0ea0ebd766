"""Simple in-memory store for sessions, images, jobs, facts, and evidence."""

from __future__ import annotations

import asyncio
import time
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

from models.errors import NotFound
from models.fact_models import Evidence, Fact
from models.image_record import ImageRecord
from models.session_models import (
	JOB_PENDING,
	SESSION_DELETED,
	AnalysisJob,
	ChatMessage,
	Session,
)


class MemoryStore:
	"""Hold all per-session state for the lifetime of the process.

	One instance is created at startup and shared through `app.state`. Every
	mutation happens on the event loop thread, so a plain attribute swap is
	never observed half done.
	"""

	def __init__(self) -> None:
		self._sessions: Dict[str, Session] = {}
		self._images: Dict[str, ImageRecord] = {}
		self._jobs: Dict[str, AnalysisJob] = {}
		self._facts: Dict[str, List[Fact]] = {}
		self._messages: Dict[str, List[ChatMessage]] = {}
		self._evidence: Dict[str, Evidence] = {}
		self._locks: Dict[str, asyncio.Lock] = {}

	# Sessions

	def create_session(self, device_id: str) -> Session:
		session = Session(id=uuid4().hex, device_id=device_id)
		self._sessions[session.id] = session
		self._facts[session.id] = []
		self._messages[session.id] = []
		return session

	def get_session(self, session_id: str) -> Session:
		"""Return an active session or raise NotFound."""
		session = self._sessions.get(session_id)
		if session is None or session.status == SESSION_DELETED:
			raise NotFound(f"Session {session_id} not found")
		return session

	def delete_session(self, session_id: str) -> Session:
		"""Drop a session and everything it owns."""
		session = self.get_session(session_id)
		session.status = SESSION_DELETED
		session.updated_at = time.time()
		self._sessions.pop(session_id, None)
		self._facts.pop(session_id, None)
		self._messages.pop(session_id, None)
		self._locks.pop(session_id, None)
		for table in (self._images, self._jobs, self._evidence):
			for key in [key for key, row in table.items() if row.session_id == session_id]:
				del table[key]
		return session

	def session_lock(self, session_id: str) -> asyncio.Lock:
		"""Lock serializing analysis runs on one session."""
		lock = self._locks.get(session_id)
		if lock is None:
			lock = self._locks[session_id] = asyncio.Lock()
		return lock

	# Images

	def add_image(self, session_id: str, object_key: Optional[str] = None, mime_type: str = "image/jpeg") -> ImageRecord:
		self.get_session(session_id)
		image_id = uuid4().hex
		record = ImageRecord(
			id=image_id,
			session_id=session_id,
			object_key=object_key or f"sessions/{session_id}/{image_id}",
			mime_type=mime_type,
		)
		self._images[image_id] = record
		return record

	def get_image(self, session_id: str, image_id: str) -> ImageRecord:
		record = self._images.get(image_id)
		if record is None or record.session_id != session_id:
			raise NotFound(f"Image {image_id} not found")
		return record

	# Jobs

	def create_job(self, session_id: str, image_ids: Sequence[str]) -> AnalysisJob:
		job = AnalysisJob(id=uuid4().hex, session_id=session_id, image_ids=list(image_ids), status=JOB_PENDING)
		self._jobs[job.id] = job
		return job

	def get_job(self, job_id: str) -> AnalysisJob:
		job = self._jobs.get(job_id)
		if job is None:
			raise NotFound(f"Job {job_id} not found")
		return job

	# Facts

	def replace_facts(self, session_id: str, facts: Sequence[Fact], image_ids: Optional[Sequence[str]] = None) -> None:
		"""Swap in `facts` for a session.

		With `image_ids`, only facts of those images are replaced and facts of
		other images are kept ahead of the new ones. Without, the whole fact
		list is replaced.
		"""
		self.get_session(session_id)
		if image_ids is None:
			kept: List[Fact] = []
		else:
			replaced = set(image_ids)
			kept = [fact for fact in self._facts.get(session_id, []) if fact.image_id not in replaced]
		self._facts[session_id] = kept + list(facts)

	def get_facts(self, session_id: str, image_ids: Optional[Sequence[str]] = None) -> List[Fact]:
		self.get_session(session_id)
		facts = self._facts.get(session_id, [])
		if image_ids:
			wanted = set(image_ids)
			return [fact for fact in facts if fact.image_id in wanted]
		return list(facts)

	# Messages

	def add_message(self, session_id: str, role: str, content: str) -> ChatMessage:
		self.get_session(session_id)
		message = ChatMessage(id=uuid4().hex, session_id=session_id, role=role, content=content)
		self._messages[session_id].append(message)
		return message

	def get_messages(self, session_id: str) -> List[ChatMessage]:
		self.get_session(session_id)
		return list(self._messages.get(session_id, []))

	# Evidence

	def put_evidence(self, evidence: Evidence) -> None:
		self._evidence[evidence.id] = evidence

	def get_evidence(self, evidence_id: str) -> Optional[Evidence]:
		return self._evidence.get(evidence_id)
