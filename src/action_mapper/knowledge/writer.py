"""
Background write-back of learned resolutions.

Resolution threads submit events and return immediately; a single daemon
thread applies them to the knowledge store one at a time, so the store
never sees two concurrent writers.
"""
import hashlib
import logging
import queue
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..models import AtomicAction, Candidate, Step
from ..utils.naming import is_java_method_name, normalize_phrase, screen_from_class

logger = logging.getLogger(__name__)

_STOP = object()


def canonical_action_id(step: Step, candidate: Candidate) -> str:
    """
    Stable id for a learned mapping.

    The same {action, target, class, method} always yields the same id, so
    a repeated discovery replaces the earlier record.
    """
    key = "|".join(
        normalize_phrase(part)
        for part in (step.action, step.target, candidate.class_name, candidate.method_name)
    )
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
    slug = re.sub(r"[^a-z0-9_]", "_", normalize_phrase(step.action))
    return f"learned_{slug}_{digest}"


def build_learned_action(
    step: Step,
    candidate: Candidate,
    source: str,
    platform: Optional[str] = None,
    brand: Optional[str] = None,
) -> AtomicAction:
    keywords = list(dict.fromkeys(
        normalize_phrase(" ".join(p for p in (step.action, step.target) if p)).split()
    ))
    return AtomicAction(
        id=canonical_action_id(step, candidate),
        action_name=step.action,
        method_name=candidate.method_name,
        class_name=candidate.class_name,
        file=candidate.file,
        target_screen=screen_from_class(candidate.class_name),
        platform=platform,
        brand=brand,
        keywords=keywords,
        description=f"Learned from {source}: {step.action} {step.target or ''}".strip(),
        source=f"learned_from_{source}",
        parameters=list(candidate.parameters),
        confidence=candidate.confidence,
    )


@dataclass(frozen=True)
class LearnedMappingEvent:
    """A step resolved by search or reasoning; becomes a new atomic action."""
    step: Step
    candidate: Candidate
    source: str
    platform: Optional[str] = None
    brand: Optional[str] = None

    def is_learnable(self) -> bool:
        return not self.candidate.is_composite and is_java_method_name(self.candidate.method_name)

    def apply(self, store) -> None:
        record = build_learned_action(self.step, self.candidate, self.source, self.platform, self.brand)
        store.add_atomic_action(record)
        phrase = " ".join(p for p in (self.step.action, self.step.target) if p)
        logger.info(
            f"Learned mapping '{phrase}' -> {record.class_name}.{record.method_name} ({record.id})"
        )


@dataclass(frozen=True)
class PatternLearnedEvent:
    """A resolved main step recorded as a reusable phrase pattern."""
    step: Step
    candidate: Candidate
    context: Dict[str, Any] = field(default_factory=dict)

    def is_learnable(self) -> bool:
        return not self.step.is_prerequisite and is_java_method_name(self.candidate.method_name)

    def apply(self, store) -> None:
        pattern = store.add_learned_pattern(
            self.step,
            self.context,
            method_name=self.candidate.method_name,
            class_name=self.candidate.class_name,
            confidence=self.candidate.confidence,
        )
        logger.debug(f"Recorded learned pattern {pattern.id}")


class LearningWriter:
    """
    Single-consumer queue in front of a knowledge store.

    submit() never blocks and never raises. Failures while applying an
    event are logged and counted.
    """

    def __init__(self, store, max_pending: int = 1000, start: bool = True):
        """
        :param store: Knowledge store receiving the writes
        :param max_pending: Events beyond this backlog are dropped with a warning
        :param start: Start the worker thread immediately
        """
        self._store = store
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=max_pending)
        self._pending = 0
        self._idle = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._stats = {"submitted": 0, "written": 0, "failed": 0, "dropped": 0, "rejected": 0}
        if start:
            self.start()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._thread = threading.Thread(
            target=self._run,
            name="LearningWriter",
            daemon=True,
        )
        self._thread.start()

    def submit(self, event) -> bool:
        """
        Queue an event for the writer thread.

        :return: True if queued, False if rejected or dropped
        """
        if not event.is_learnable():
            self._stats["rejected"] += 1
            logger.debug(f"Not learning {event.candidate.method_name}: not a plain method name")
            return False

        with self._idle:
            self._pending += 1
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with self._idle:
                self._pending -= 1
                self._idle.notify_all()
            self._stats["dropped"] += 1
            logger.warning("Learning writer backlog full, dropping write-back")
            return False

        self._stats["submitted"] += 1
        return True

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued event has been applied."""
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)

    def close(self, timeout: float = 5.0) -> None:
        if not self.is_running:
            return
        self.flush(timeout)
        self._queue.put(_STOP)
        self._thread.join(timeout=timeout)
        logger.debug("Learning writer stopped")

    def get_stats(self) -> Dict[str, int]:
        return {**self._stats, "pending": self._pending}

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            if event is _STOP:
                break
            try:
                event.apply(self._store)
                self._stats["written"] += 1
            except Exception as e:
                self._stats["failed"] += 1
                logger.warning(f"Write-back failed for {type(event).__name__}: {e}", exc_info=True)
            finally:
                with self._idle:
                    self._pending -= 1
                    self._idle.notify_all()
