"""Tests for Celery task retry behaviour."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from celery.exceptions import Retry

from app.workers import tasks


@pytest.mark.unit
class TestRetries:
    """New-job follow-ups run at most three times."""

    @pytest.mark.parametrize("task", [tasks.match_new_job, tasks.create_category_page])
    def test_three_attempts(self, task) -> None:
        """One try plus two retries."""
        assert task.max_retries == 2

    def test_match_new_job_retries_on_failure(self) -> None:
        """A failing run schedules a retry with backoff."""
        with patch.object(tasks, "run_async", side_effect=RuntimeError("db down")), patch.object(
            tasks.match_new_job, "retry", side_effect=Retry()
        ) as retry:
            with pytest.raises(Retry):
                tasks.match_new_job("0b7c6f2e-0000-4000-8000-000000000001")

        assert retry.call_args.kwargs["countdown"] == 2
        assert str(retry.call_args.kwargs["exc"]) == "db down"
