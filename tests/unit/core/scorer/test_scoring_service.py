#!/usr/bin/env python3
"""
Unit tests for QCSScoringService.

The database is an in-memory mock repository and the chat client a mock,
so these tests cover orchestration: AI gating, timeouts, blending and the
persistence fallback.
"""

import threading
import time
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import AppConfig, CircuitBreakerConfig, LlmConfig
from core.errors import ProfileNotFoundError, PersistenceError
from core.llm.circuit_breaker import UserCircuitBreaker, backoff_delay_seconds
from core.llm.client import AllAttemptsFailedError, AiRequestCancelled, ResilientChatClient
from core.llm.interfaces import ChatCompletionResult
from core.scorer.blend import blend_score, validate_score
from core.scorer.service import QCSScoringService, extract_ai_score, fallback_response
from tests.conftest import make_profile_row, make_uow


def _profile_row(user_id="u1"):
    return make_profile_row(
        user_id,
        gender="female",
        date_of_birth=date(1996, 3, 14),
        year_of_study="3rd Year",
        field_of_study="Computer Engineering",
        height=168,
        body_type="athletic",
        personality_traits=["empathetic", "creative"],
        values=["open-minded"],
        interests=["fitness", "technology", "travel"],
        bio="I love hiking and I am kind",
        reports_count=1,
    )


class ScoringServiceTestCase(unittest.TestCase):

    def setUp(self):
        self.repo = MagicMock()
        self.repo.profiles.get_by_user_id.return_value = _profile_row()
        self.config = AppConfig()
        self.chat_client = MagicMock()
        self.chat_client.complete.return_value = ChatCompletionResult(
            model="m1",
            content={"final_score": 80, "reason": "Well rounded", "insights": "Warm bio"},
            attempts={"m1": 1},
        )
        self.breaker = MagicMock()
        self.breaker.allows.return_value = True
        self.service = self._build()

    def tearDown(self):
        self.service.shutdown()

    def _build(self, **overrides):
        kwargs = dict(
            config=self.config,
            uow_factory=make_uow(self.repo),
            chat_client=self.chat_client,
            breaker=self.breaker,
        )
        kwargs.update(overrides)
        return QCSScoringService(**kwargs)


class TestScoreUser(ScoringServiceTestCase):

    def test_01_ai_success_is_blended(self):
        result = self.service.score_user("u1")

        self.assertEqual(result.ai.status, "success")
        self.assertEqual(result.ai_score, 80)
        self.assertEqual(result.total_score, blend_score(result.raw_logic_score, 80, self.config.blend))
        self.assertEqual(result.logic_score, validate_score(result.raw_logic_score))
        self.assertEqual(result.persistence, "atomic")
        self.assertEqual(result.components.behavior_score, 8)
        self.breaker.record_success.assert_called_once_with("u1")
        self.repo.qcs.atomic_update.assert_called_once()

    def test_02_hints_reach_the_prompt(self):
        self.service.score_user("u1", physical="tall and fit", mental=None, description="Loves dogs")

        messages = self.chat_client.complete.call_args[0][0]
        user_prompt = messages[1]["content"]
        self.assertIn("Physical: tall and fit", user_prompt)
        self.assertIn("Description: Loves dogs", user_prompt)
        # Derived from the profile when the request gives none
        self.assertIn("Mental: average ambitious", user_prompt)

    def test_03_circuit_open_skips_ai(self):
        self.breaker.allows.return_value = False

        result = self.service.score_user("u1")

        self.chat_client.complete.assert_not_called()
        self.assertEqual(result.ai.status, "circuit_open")
        self.assertIsNone(result.ai_score)
        self.assertEqual(result.total_score, validate_score(result.raw_logic_score))

    def test_04_no_client_means_disabled(self):
        service = self._build(chat_client=None)
        try:
            result = service.score_user("u1")
        finally:
            service.shutdown()

        self.assertEqual(result.ai.status, "disabled")
        self.assertEqual(result.total_score, result.logic_score)

    def test_05_all_models_failed_records_failure(self):
        self.chat_client.complete.side_effect = AllAttemptsFailedError(
            "boom", last_error={"status": 503, "raw": "x" * 500, "model": "m2"}, attempts={"m1": 3, "m2": 3}
        )

        result = self.service.score_user("u1")

        self.assertEqual(result.ai.status, "failed")
        self.assertEqual(result.ai.attempts, {"m1": 3, "m2": 3})
        self.assertEqual(len(result.ai.error["raw"]), 200)
        self.assertIsNone(result.ai_score)
        self.breaker.record_failure.assert_called_once_with("u1")
        self.breaker.record_success.assert_not_called()

    def test_06_reply_without_score(self):
        self.chat_client.complete.return_value = ChatCompletionResult(
            model="m1", content={"reason": "no number here"}, attempts={"m1": 1}
        )

        result = self.service.score_user("u1")

        self.assertEqual(result.ai.status, "invalid_response")
        self.assertIsNone(result.ai_score)
        self.breaker.record_success.assert_called_once_with("u1")

    def test_07_timeout_falls_back_and_cancels_worker(self):
        self.config.scoring.ai_phase_timeout_seconds = 0.05
        worker_cancelled = threading.Event()

        def slow_complete(messages, preferred_model=None, parse_json=True, cancel_event=None):
            cancel_event.wait(5)
            worker_cancelled.set()
            raise AiRequestCancelled("cancelled")

        self.chat_client.complete.side_effect = slow_complete

        result = self.service.score_user("u1")

        self.assertEqual(result.ai.status, "timeout")
        self.assertIsNone(result.ai_score)
        self.assertTrue(worker_cancelled.wait(5))
        self.breaker.record_failure.assert_called_once_with("u1")

    def test_08_profile_not_found(self):
        self.repo.profiles.get_by_user_id.return_value = None

        with self.assertRaises(ProfileNotFoundError):
            self.service.score_user("ghost")
        self.repo.qcs.atomic_update.assert_not_called()

    def test_09_database_unreadable(self):
        self.repo.profiles.get_by_user_id.side_effect = SQLAlchemyError("connection refused")

        with self.assertRaises(PersistenceError):
            self.service.score_user("u1")

    def test_10_sequential_fallback(self):
        self.repo.qcs.atomic_update.side_effect = SQLAlchemyError("function does not exist")

        result = self.service.score_user("u1")

        self.assertEqual(result.persistence, "sequential")
        self.repo.qcs.upsert_record.assert_called_once()
        self.repo.qcs.update_profile_summary.assert_called_once_with("u1", result.total_score)

    def test_11_persistence_failure_still_returns_score(self):
        self.repo.qcs.atomic_update.side_effect = SQLAlchemyError("down")
        self.repo.qcs.upsert_record.side_effect = SQLAlchemyError("down")

        result = self.service.score_user("u1")

        self.assertEqual(result.persistence, "failed")
        self.assertEqual(result.ai_score, 80)

    def test_12_ai_meta_written(self):
        self.service.score_user("u1")

        kwargs = self.repo.qcs.atomic_update.call_args.kwargs
        self.assertEqual(kwargs["ai_meta"]["status"], "success")
        self.assertIn("persona", kwargs["ai_meta"])
        self.assertEqual(set(kwargs["components"]), {
            "profile_score", "college_tier", "personality_depth", "behavior_score"
        })


class TestAiPhaseAccounting(ScoringServiceTestCase):

    def _drain(self):
        # Wait for workers that outlived the phase timeout
        self.service.executor.shutdown(wait=True)

    def test_failure_after_timeout_counted_once(self):
        self.config.scoring.ai_phase_timeout_seconds = 0.05
        session = MagicMock()

        def slow_unavailable(*args, **kwargs):
            time.sleep(0.3)
            return MagicMock(status_code=503, text="Service Unavailable")

        session.post.side_effect = slow_unavailable
        client = ResilientChatClient(
            LlmConfig(api_key="sk-test", default_models=["m1"], max_retries=1), session=session
        )
        self.service.shutdown()
        self.service = self._build(chat_client=client)

        result = self.service.score_user("u1")
        self._drain()

        self.assertEqual(result.ai.status, "timeout")
        session.post.assert_called_once()
        self.assertEqual(self.breaker.record_failure.call_count, 1)
        self.breaker.record_success.assert_not_called()

    def test_reply_after_timeout_is_discarded(self):
        self.config.scoring.ai_phase_timeout_seconds = 0.05

        def late_reply(messages, preferred_model=None, parse_json=True, cancel_event=None):
            cancel_event.wait(5)
            return ChatCompletionResult(model="m1", content={"final_score": 90}, attempts={"m1": 1})

        self.chat_client.complete.side_effect = late_reply

        result = self.service.score_user("u1")
        self._drain()

        self.assertIsNone(result.ai_score)
        self.breaker.record_failure.assert_called_once_with("u1")
        self.breaker.record_success.assert_not_called()

    def test_queued_request_timeout_records_nothing(self):
        self.config.scoring.ai_phase_timeout_seconds = 0.05
        release = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1)
        executor.submit(release.wait, 5)
        self.service.shutdown()
        self.service = self._build(executor=executor)

        try:
            result = self.service.score_user("u2")
        finally:
            release.set()
        self._drain()

        self.assertEqual(result.ai.status, "timeout")
        self.assertIsNone(result.ai_score)
        self.chat_client.complete.assert_not_called()
        self.breaker.record_failure.assert_not_called()

    def test_unexpected_client_error_keeps_logic_score(self):
        self.chat_client.complete.side_effect = AttributeError("'str' object has no attribute 'get'")

        result = self.service.score_user("u1")

        self.assertEqual(result.ai.status, "failed")
        self.assertEqual(result.ai.error["reason"], "unexpected_error")
        self.assertIsNone(result.ai_score)
        self.assertEqual(result.total_score, validate_score(result.raw_logic_score))
        self.assertEqual(result.persistence, "atomic")
        self.breaker.record_failure.assert_called_once_with("u1")


class InMemoryAiFailures:
    """ai_failures repository keeping backoff state in a dict."""

    def __init__(self, clock):
        self.clock = clock
        self.rows = {}

    def get_state(self, user_id):
        return self.rows.get(user_id)

    def reset(self, user_id):
        return 1 if self.rows.pop(user_id, None) else 0

    def record_failure(self, user_id, base_delay_seconds, max_delay_seconds):
        row = self.rows.get(user_id)
        count = (row.failure_count if row else 0) + 1
        delay = backoff_delay_seconds(count, CircuitBreakerConfig(
            base_delay_seconds=base_delay_seconds, max_delay_seconds=max_delay_seconds
        ))
        next_allowed = self.clock() + timedelta(seconds=delay)
        self.rows[user_id] = SimpleNamespace(failure_count=count, next_allowed_at=next_allowed)
        return count, next_allowed


class TestCircuitBreakerIntegration(ScoringServiceTestCase):

    def setUp(self):
        super().setUp()
        self.now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        self.repo.ai_failures = InMemoryAiFailures(lambda: self.now)
        self.breaker = UserCircuitBreaker(make_uow(self.repo), CircuitBreakerConfig(), clock=lambda: self.now)
        self.chat_client.complete.side_effect = AllAttemptsFailedError("down", attempts={"m1": 3})
        self.service.shutdown()
        self.service = self._build()

    def _fail_once(self):
        # Step to the moment the previous window closes
        state = self.repo.ai_failures.get_state("u1")
        if state is not None:
            self.now = state.next_allowed_at
        result = self.service.score_user("u1")
        self.assertEqual(result.ai.status, "failed")

    def test_no_requests_inside_backoff_window(self):
        for _ in range(3):
            self._fail_once()
        state = self.repo.ai_failures.get_state("u1")
        self.assertEqual(state.failure_count, 3)
        self.assertEqual(state.next_allowed_at - self.now, timedelta(seconds=240))
        calls_before = self.chat_client.complete.call_count

        self.now += timedelta(seconds=239)
        result = self.service.score_user("u1")

        self.assertEqual(self.chat_client.complete.call_count, calls_before)
        self.assertEqual(result.ai.status, "circuit_open")
        self.assertIsNone(result.ai_score)
        self.assertEqual(result.total_score, validate_score(result.raw_logic_score))

    def test_window_elapses_and_success_resets(self):
        self._fail_once()
        self.now += timedelta(seconds=60)
        self.chat_client.complete.side_effect = None

        result = self.service.score_user("u1")

        self.assertEqual(result.ai.status, "success")
        self.assertIsNone(self.repo.ai_failures.get_state("u1"))


class TestRecordsAndSync(ScoringServiceTestCase):

    def test_get_record_missing(self):
        self.repo.qcs.get_by_user_id.return_value = None
        self.assertIsNone(self.service.get_record("u1"))

    def test_get_record(self):
        record = MagicMock(
            user_id="u1", total_score=72, logic_score=70, ai_score=75,
            profile_score=20, college_tier=25, personality_depth=22, behavior_score=10,
            per_category={"bio": 0.4}, ai_meta={"status": "success"}, last_computed_at=None,
        )
        self.repo.qcs.get_by_user_id.return_value = record

        data = self.service.get_record("u1")

        self.assertEqual(data["total_score"], 72)
        self.assertEqual(data["per_category"], {"bio": 0.4})
        self.assertIsNone(data["last_computed_at"])

    def test_sync_reports_per_user_outcome(self):
        self.repo.profiles.get_active_user_ids.return_value = ["u1", "ghost"]
        self.repo.profiles.get_by_user_id.side_effect = (
            lambda user_id: _profile_row(user_id) if user_id == "u1" else None
        )

        results = self.service.sync_users(limit=10, offset=0)

        self.repo.profiles.get_active_user_ids.assert_called_once_with(limit=10, offset=0)
        self.assertEqual(len(results), 2)
        self.assertTrue(results[0]["success"])
        self.assertFalse(results[1]["success"])
        self.assertIn("ghost", results[1]["error"])


class TestHelpers(unittest.TestCase):

    def test_extract_ai_score(self):
        self.assertEqual(extract_ai_score({"final_score": 77}), 77)
        self.assertEqual(extract_ai_score({"score": 120}), 100)
        self.assertEqual(extract_ai_score({"predicted_score": 55.5}), 56)
        self.assertIsNone(extract_ai_score({"final_score": "80"}))
        self.assertIsNone(extract_ai_score("80"))

    def test_fallback_response(self):
        payload = fallback_response("u1", 60, "RuntimeError")

        self.assertFalse(payload["success"])
        self.assertTrue(payload["fallback_mode"])
        self.assertEqual(payload["qcs"]["total_score"], 60)
        self.assertEqual(payload["qcs"]["logic_score"], 60)
        self.assertEqual(payload["qcs"]["college_tier"], 20)
        self.assertEqual(payload["ai_status"]["error_type"], "RuntimeError")


if __name__ == '__main__':
    unittest.main()
