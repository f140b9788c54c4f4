import pytest

from cookite.client.errors import RateLimited, TransientServerError, ValidationFailed
from cookite.client.retry import backoff_delay, is_transient, with_retry


pytestmark = pytest.mark.asyncio


class Flaky:
    def __init__(self, failures):
        self.failures = list(failures)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return "done"


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


async def test_retries_server_errors_then_succeeds():
    operation = Flaky([RuntimeError("HTTP 503"), RuntimeError("HTTP 503")])
    sleep = RecordingSleep()

    result = await with_retry(operation, max_attempts=3, base_delay=1.0, sleep=sleep)

    assert result == "done"
    assert operation.calls == 3
    assert len(sleep.delays) == 2
    assert 1.0 <= sleep.delays[0] <= 2.0
    assert 2.0 <= sleep.delays[1] <= 3.0


async def test_client_errors_are_not_retried():
    operation = Flaky([RuntimeError("HTTP 400")])
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError, match="400"):
        await with_retry(operation, sleep=sleep)

    assert operation.calls == 1
    assert sleep.delays == []


async def test_last_error_is_raised_when_attempts_run_out():
    errors = [TransientServerError("down", 502) for _ in range(3)]
    operation = Flaky(errors)
    sleep = RecordingSleep()

    with pytest.raises(TransientServerError) as excinfo:
        await with_retry(operation, max_attempts=3, sleep=sleep)

    assert excinfo.value is errors[2]
    assert operation.calls == 3
    assert len(sleep.delays) == 2


async def test_error_classification():
    assert is_transient(TransientServerError("Erro interno do servidor.", 500))
    assert is_transient(RuntimeError("status 502"))
    assert not is_transient(ValidationFailed("Email inválido"))
    assert not is_transient(RateLimited("Muitas tentativas.", 429))


async def test_backoff_grows_exponentially():
    assert 4.0 <= backoff_delay(3, 1.0) <= 5.0
    assert 0.5 <= backoff_delay(1, 0.5) <= 1.5
