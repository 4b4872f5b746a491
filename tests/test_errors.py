"""
Unit tests for the tagged outcome helper.
"""
import pytest

from weather_locations.errors import NotFoundError, RemoteError, ValidationError, attempt


async def succeed():
    return 42


async def fail(error):
    raise error


@pytest.mark.asyncio
async def test_attempt_success():
    outcome = await attempt(succeed())

    assert outcome.ok is True
    assert outcome.value == 42
    assert outcome.kind == "ok"
    assert outcome.status is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, kind",
    [
        (ValidationError("Please enter a city name"), "validation"),
        (NotFoundError("Location 3 not found"), "not_found"),
        (RemoteError(500, "Failed to save location"), "remote"),
    ],
)
async def test_attempt_failure_is_tagged(error, kind):
    outcome = await attempt(fail(error))

    assert outcome.ok is False
    assert outcome.error is error
    assert outcome.kind == kind


@pytest.mark.asyncio
async def test_attempt_exposes_remote_status():
    outcome = await attempt(fail(RemoteError(404, "city not found")))

    assert outcome.status == 404
    assert outcome.error.message == "city not found"


@pytest.mark.asyncio
async def test_attempt_does_not_swallow_unexpected_errors():
    with pytest.raises(KeyError):
        await attempt(fail(KeyError("bug")))
