from __future__ import annotations

import logging
import math
import threading
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Iterator, List, Optional, Sequence
from uuid import uuid4

from agents import fallback
from agents.question_generator import generate_question
from agents.response_evaluator import evaluate_answer
from agents.types import (
    AnswerEvaluation,
    AuditEntry,
    Question,
    RawEvaluation,
    SessionState,
    SessionStatus,
    SessionSummary,
    StructuredProfile,
    StructuredRole,
    Turn,
)
from config.policy import Difficulty, PolicyConfig, get_policy
from config.settings import settings
from jd_analysis.skill_gaps import analyze_skill_gaps
from observability import log_event, span
from services import scoring

logger = logging.getLogger(__name__)

Evaluator = Callable[[Question, str], RawEvaluation]
Generator = Callable[[StructuredRole, StructuredProfile, Difficulty, Sequence[str]], Question]
Subscriber = Callable[[SessionState], None]

FALLBACK_MODE = "FALLBACK_RULE_BASED"


class MissingPreconditionError(RuntimeError):  # Operation needs data the session does not have
    pass


class InterviewSession:  # Stateful driver for one interview session
    """Own one session's state and apply the interview policy to it.

    Every public operation either performs a legal state transition and
    returns a truthy value, or is rejected: logged, audited and answered with
    ``False``/``None`` without touching the state. Observers registered with
    :meth:`subscribe` receive the frozen :class:`SessionState` after each
    change.
    """

    def __init__(
        self,
        *,
        policy: Optional[PolicyConfig] = None,
        evaluator: Optional[Evaluator] = None,
        generator: Optional[Generator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        audit_limit: Optional[int] = None,
    ) -> None:
        self._policy = policy or get_policy()
        self._evaluator = evaluator or self._default_evaluator
        self._generator = generator or generate_question
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()
        self._audit: Deque[AuditEntry] = deque(maxlen=audit_limit or settings.AUDIT_LOG_LIMIT)
        self._state = self._initial_state()

    # ------------------------------------------------------------------
    # State access & notifications
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def policy(self) -> PolicyConfig:
        return self._policy

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; the returned function unsubscribes it."""

        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscribers = [cb for cb in self._subscribers if cb is not callback]

    def summary(self) -> SessionSummary:
        state = self._state
        average = scoring.average_score(state.score_history)
        return SessionSummary(
            session_id=state.session_id,
            status=state.status,
            turns_answered=len(state.turns),
            average_score=average,
            passed=state.status == SessionStatus.COMPLETED
            and average >= self._policy.scoring.passing_threshold,
            termination_reason=state.termination_reason,
            evaluation_mode=state.evaluation_mode,
        )

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------
    def start_analysis(self) -> bool:
        """Begin analysis; a session that already finished analysis needs `reset` first."""

        with self._exclusive("start_analysis") as acquired:
            if not acquired:
                return False
            status = self._state.status
            if status == SessionStatus.ANALYZING:
                return self._reject("start_analysis", "analysis already in progress")
            if status != SessionStatus.IDLE or self._state.analysis_complete:
                return self._reject("start_analysis", f"not allowed from {self._describe_status()}")
            self._record("STATE", "Analyzing documents against policy...")
            self._update(status=SessionStatus.ANALYZING)
            self._publish()
            return True

    def initialize_session(self, role: StructuredRole, profile: StructuredProfile) -> bool:
        """Run the skill-gap analysis and park the session in ready ``IDLE``."""

        with self._exclusive("initialize_session") as acquired:
            if not acquired:
                return False
            if self._state.status != SessionStatus.ANALYZING:
                return self._reject("initialize_session", f"not allowed from {self._describe_status()}")

            difficulty = scoring.initial_difficulty(role.complexity_level, self._policy)
            self._record(
                "POLICY",
                f"Role complexity '{role.complexity_level}' sets initial difficulty to {difficulty.value}.",
            )

            report = analyze_skill_gaps(role, profile, self._policy)
            self._record(
                "ANALYSIS",
                f"Found {len(report.gaps)} skill gaps ({report.primary_missing} primary).",
            )

            ceiling = report.difficulty_ceiling
            if ceiling is not None:
                threshold = self._policy.difficulty.ceiling.critical_gap_match_threshold
                self._record(
                    "POLICY",
                    f"Critical skill match ({report.critical_match_ratio:.0%}) < {threshold:.0%}. "
                    f"Difficulty capped at {ceiling.value}.",
                )
                if difficulty.rank > ceiling.rank:
                    difficulty = ceiling

            self._record("STATE", "Initialization complete. Waiting for interview start.")
            self._update(
                status=SessionStatus.IDLE,
                analysis_complete=True,
                current_difficulty=difficulty,
                skill_gaps=report.gaps,
                difficulty_ceiling=ceiling,
            )
            self._publish()
            log_event(
                "initialized",
                self._state.session_id,
                difficulty=difficulty.value,
                gaps=len(report.gaps),
                ceiling=ceiling.value if ceiling else None,
            )
            return True

    def set_generating(self) -> bool:
        """Lock the ready session while the first question is fetched."""

        with self._exclusive("set_generating") as acquired:
            if not acquired:
                return False
            if not self._is_ready():
                return self._reject("set_generating", f"not allowed from {self._describe_status()}")
            self._update(status=SessionStatus.GENERATING)
            self._publish()
            return True

    def start_interview(self, question: Question) -> bool:
        with self._exclusive("start_interview") as acquired:
            if not acquired:
                return False
            if self._is_ready():
                self._update(status=SessionStatus.GENERATING)
                self._publish()
            elif self._state.status != SessionStatus.GENERATING:
                return self._reject("start_interview", f"not allowed from {self._describe_status()}")
            self._record("STATE", "Session initialized. Transitioning to INTERVIEWING.")
            self._present(question)
            return True

    def present_question(self, question: Question) -> bool:
        with self._exclusive("present_question") as acquired:
            if not acquired:
                return False
            if self._state.status != SessionStatus.GENERATING:
                return self._reject("present_question", f"not allowed from {self._describe_status()}")
            self._present(question)
            return True

    def begin_interview(self, role: StructuredRole, profile: StructuredProfile) -> Optional[Question]:
        """Fetch and present the first question from the ready state."""

        with self._exclusive("begin_interview") as acquired:
            if not acquired:
                return None
            if not self._is_ready():
                self._reject("begin_interview", f"not allowed from {self._describe_status()}")
                return None
            self._update(status=SessionStatus.GENERATING)
            self._publish()
            question = self._generate(role, profile)
            self._record("STATE", "Session initialized. Transitioning to INTERVIEWING.")
            self._present(question)
            return question

    def next_question(self, role: StructuredRole, profile: StructuredProfile) -> Optional[Question]:
        """Fetch and present the next question after a scored turn."""

        with self._exclusive("next_question") as acquired:
            if not acquired:
                return None
            if self._state.status != SessionStatus.GENERATING:
                self._reject("next_question", f"not allowed from {self._describe_status()}")
                return None
            question = self._generate(role, profile)
            self._present(question)
            return question

    def submit_answer(self, answer_text: str, time_taken_seconds: float) -> Optional[Turn]:
        """Score the answer to the active question and advance the session.

        Raises:
            MissingPreconditionError: If no question is currently active.
        """

        with self._exclusive("submit_answer") as acquired:
            if not acquired:
                return None
            question = self._state.active_question
            if question is None:
                raise MissingPreconditionError("Cannot submit answer: no active question.")
            if self._state.status != SessionStatus.INTERVIEWING:
                self._reject("submit_answer", f"not allowed from {self._describe_status()}")
                return None

            elapsed = float(time_taken_seconds)
            if not math.isfinite(elapsed):
                self._reject("submit_answer", f"answer time must be finite, got {elapsed}")
                return None

            answer_text = answer_text or ""
            elapsed = max(0.0, elapsed)
            self._record("EVENT", f"Answer submitted. Time: {elapsed:.1f}s.")
            self._update(status=SessionStatus.EVALUATING)
            self._publish()

            raw = self._pre_filter(answer_text, elapsed)
            if raw is None:
                raw = self._evaluate(question, answer_text)
            turn = self._score_turn(question, answer_text, elapsed, raw)

            if not self._check_termination():
                self._update(status=SessionStatus.GENERATING)
            self._publish()
            return turn

    def reset(self) -> bool:
        with self._exclusive("reset") as acquired:
            if not acquired:
                return False
            self._audit.clear()
            self._state = self._initial_state()
            self._publish()
            return True

    # ------------------------------------------------------------------
    # Scoring pipeline
    # ------------------------------------------------------------------
    def _pre_filter(self, answer: str, elapsed: float) -> Optional[RawEvaluation]:
        edge = self._policy.edge_cases
        if not answer.strip():
            zero = edge.empty_answer_score
            self._record("EDGE CASE", f"Empty answer detected. Forcing score to {zero}.")
            return RawEvaluation(
                accuracy=zero,
                depth=zero,
                clarity=zero,
                relevance=zero,
                feedback="Automatic Failure: No answer provided.",
                is_fallback=True,
            )
        if len(answer) > 5 and elapsed * 1000 < self._policy.timing.min_answer_time_ms:
            zero = edge.spam_answer_score
            self._record(
                "EDGE CASE",
                f"Response time ({elapsed}s) below biological threshold. Flagged as spam.",
            )
            return RawEvaluation(
                accuracy=zero,
                depth=zero,
                clarity=zero,
                relevance=zero,
                feedback="Automatic Failure: Response time impossibly fast (Spam detection).",
                is_fallback=True,
            )
        return None

    def _evaluate(self, question: Question, answer: str) -> RawEvaluation:
        session_id = self._state.session_id
        try:
            with span(session_id, "evaluate_answer", skill=question.target_skill):
                raw: Any = self._evaluator(question, answer)
                if not isinstance(raw, RawEvaluation):
                    raw = RawEvaluation.model_validate(raw)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Evaluator failed for session %s: %s", session_id, exc)
            raw = fallback.evaluate(question, answer, self._policy)

        if raw.is_fallback and self._state.evaluation_mode != FALLBACK_MODE:
            self._update(evaluation_mode=FALLBACK_MODE)
            self._record("WARN", "External evaluator unavailable. Switched to deterministic fallback mode.")
            log_event("mode_switch", session_id, level=logging.WARNING, mode=FALLBACK_MODE)
        return raw

    def _score_turn(self, question: Question, answer: str, elapsed: float, raw: RawEvaluation) -> Turn:
        policy = self._policy
        state = self._state

        base = scoring.calculate_score(raw, policy)

        time_penalty, violation = scoring.calculate_time_penalty(elapsed, policy)
        violations = state.time_violations
        if violation:
            violations += 1
            self._record("POLICY", f"Time violation #{violations} recorded (-{time_penalty} pts).")

        gap_penalty, gap_type = scoring.skill_gap_penalty(question.target_skill, state.skill_gaps, policy)
        if gap_penalty > 0:
            self._record(
                "POLICY",
                f"{gap_type} skill gap ('{question.target_skill}') penalty applied: -{gap_penalty}",
            )

        final = scoring.final_score(base, time_penalty, gap_penalty)
        self._record(
            "SCORE",
            f"Base: {base} | Time: -{time_penalty} | Gap: -{gap_penalty} | Final: {final:.2f}",
        )

        current = state.current_difficulty
        ceiling = state.difficulty_ceiling
        following = scoring.next_difficulty(current, final, ceiling, policy)
        uncapped = scoring.next_difficulty(current, final, None, policy)
        if uncapped.rank > following.rank:
            self._record("ADAPT", f"Adaptation blocked by policy ceiling ({ceiling.value}).")
        elif following != current:
            self._record("ADAPT", f"Difficulty transitioning: {current.value} -> {following.value}")

        strikes = scoring.strike_delta(final, policy)
        weak_answers = state.consecutive_weak_answers
        if scoring.is_critical_failure(final, policy):
            self._record(
                "RISK",
                f"Critical failure (<= {policy.scoring.critical_fail_score}). +{strikes} strikes.",
            )
        elif strikes:
            self._record("RISK", f"Weak answer (<= {policy.scoring.weak_score}). +{strikes} strike.")
        elif weak_answers > 0:
            self._record("RECOVERY", "Performance stabilized. Resetting consecutive strike counter.")
            weak_answers = 0
        weak_answers += strikes

        evaluation = AnswerEvaluation(
            **raw.model_dump(),
            base_score=base,
            time_penalty=time_penalty,
            skill_gap_penalty=gap_penalty,
            final_score=final,
            time_taken_seconds=elapsed,
        )
        turn = Turn(
            question=question,
            answer=answer,
            evaluation=evaluation,
            difficulty_before=current,
            difficulty_after=following,
            timestamp=self._clock(),
            critical_failure=scoring.is_critical_failure(final, policy),
        )
        self._update(
            turns=state.turns + (turn,),
            score_history=state.score_history + (final,),
            current_difficulty=following,
            time_violations=violations,
            consecutive_weak_answers=weak_answers,
            active_question=None,
        )
        log_event(
            "turn_scored",
            state.session_id,
            score=final,
            difficulty=following.value,
            mode=self._state.evaluation_mode,
            answer_preview=answer[: settings.ANSWER_PREVIEW_CHARS],
        )
        return turn

    def _check_termination(self) -> bool:
        state = self._state
        max_violations = self._policy.timing.max_violations_allowed
        limits = self._policy.termination

        if state.time_violations > max_violations:
            self._terminate(
                f"Time Management Failure: {state.time_violations} violations exceeded limit of {max_violations}."
            )
            return True
        if state.consecutive_weak_answers >= limits.strike_limit:
            self._terminate(
                f"Performance Threshold Reached: {state.consecutive_weak_answers} consecutive strikes."
            )
            return True
        if len(state.turns) >= limits.max_questions:
            self._record_final_score()
            self._record("TERM", "Interview completed: maximum question depth reached.")
            self._update(status=SessionStatus.COMPLETED)
            log_event("completed", state.session_id, status=SessionStatus.COMPLETED.value)
            return True
        return False

    def _terminate(self, reason: str) -> None:
        self._record_final_score()
        self._record("TERM", f"TERMINATION TRIGGERED: {reason}")
        self._update(status=SessionStatus.TERMINATED, termination_reason=reason)
        log_event("terminated", self._state.session_id, status=SessionStatus.TERMINATED.value, reason=reason)

    def _record_final_score(self) -> None:
        self._record("FINAL", f"Interview score finalized: {scoring.average_score(self._state.score_history):.2f}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _default_evaluator(self, question: Question, answer: str) -> RawEvaluation:
        return evaluate_answer(question, answer, policy=self._policy)

    def _generate(self, role: StructuredRole, profile: StructuredProfile) -> Question:
        state = self._state
        asked = [turn.question.text for turn in state.turns]
        try:
            with span(state.session_id, "generate_question", difficulty=state.current_difficulty.value):
                return self._generator(role, profile, state.current_difficulty, asked)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Question generator failed for session %s: %s", state.session_id, exc)
            return fallback.fallback_question(state.current_difficulty, asked)

    def _present(self, question: Question) -> None:
        # The question must be in place before the status says INTERVIEWING.
        self._update(active_question=question)
        self._update(status=SessionStatus.INTERVIEWING)
        self._record(
            "QUESTION",
            f"Q{len(self._state.turns) + 1} presented: {question.target_skill} ({question.difficulty.value}).",
        )
        self._publish()

    def _is_ready(self) -> bool:
        return self._state.status == SessionStatus.IDLE and self._state.analysis_complete

    def _describe_status(self) -> str:
        if self._is_ready():
            return "IDLE (ready)"
        return self._state.status.value

    def _initial_state(self) -> SessionState:
        self._audit.append(
            AuditEntry(at=self._clock(), tag="SYSTEM", message="Engine online. Policy: strict. Mode: deterministic.")
        )
        return SessionState(session_id=uuid4().hex, policy=self._policy, audit_log=tuple(self._audit))

    def _record(self, tag: str, message: str) -> None:
        self._audit.append(AuditEntry(at=self._clock(), tag=tag, message=message))
        self._state = self._state.model_copy(update={"audit_log": tuple(self._audit)})
        logger.info("session=%s [%s] %s", self._state.session_id, tag, message)

    def _update(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)

    def _publish(self) -> None:
        snapshot = self._state
        log_event(
            "state",
            snapshot.session_id,
            level=logging.DEBUG,
            status=snapshot.status.value,
            difficulty=snapshot.current_difficulty.value,
            mode=snapshot.evaluation_mode,
        )
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("Subscriber %r failed on session %s", callback, snapshot.session_id)

    def _reject(self, operation: str, reason: str) -> bool:
        logger.warning("Rejected %s on session %s: %s", operation, self._state.session_id, reason)
        self._record("WARN", f"Rejected {operation}: {reason}.")
        self._publish()
        return False

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[bool]:
        # Overlapping calls are turned away rather than queued.
        acquired = self._lock.acquire(blocking=False)
        if not acquired:
            logger.warning(
                "Rejected %s on session %s: another operation is in progress",
                operation,
                self._state.session_id,
            )
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()


__all__ = ["InterviewSession", "MissingPreconditionError", "FALLBACK_MODE"]
