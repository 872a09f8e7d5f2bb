"""Scripted provider and snapshot builders shared by the test modules."""

from models.prediction import JobState, JobStatus

TEST_API_KEY = "r8_test_secret_key_do_not_leak"


def job(status, output=None, error=None, handle="pred-123"):
    """Build a JobState snapshot for scripting a fake provider."""
    return JobState(
        handle=handle,
        status=JobStatus(status),
        output=tuple(output) if output is not None else None,
        error=error,
    )


class FakeProvider:
    """Scripted stand-in for ReplicateClient.

    `statuses` is consumed one entry per status call; the last entry repeats
    once the script runs out. Exception instances in the script are raised.
    """

    def __init__(self, submit=None, statuses=(), submit_error=None):
        self.submit_state = submit if submit is not None else job("pending")
        self.statuses = list(statuses)
        self.submit_error = submit_error
        self.submissions = []
        self.status_calls = []

    async def submit_job(self, payload):
        self.submissions.append(payload)
        if self.submit_error is not None:
            raise self.submit_error
        return self.submit_state

    async def get_job_status(self, handle):
        self.status_calls.append(handle)
        if len(self.statuses) > 1:
            state = self.statuses.pop(0)
        else:
            state = self.statuses[0]
        if isinstance(state, Exception):
            raise state
        return state
