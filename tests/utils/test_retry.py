# ABOUTME: Tests for the enrichment retry decorator using tenacity
# ABOUTME: Validates which errors are retried, the attempt budget and the rate-limit policy

import httpx
import pytest

from seinfeld_tonight.utils.retry import (
    EnrichmentError,
    EnrichmentParseError,
    EnrichmentResponseError,
    EnrichmentTransportError,
    RateLimitPolicy,
    enrichment_retry,
)

NO_WAIT = RateLimitPolicy(max_attempts=3, backoff_step=0, delay_between_calls=0)


class TestEnrichmentErrors:
    """Test enrichment-specific exception types."""

    def test_error_hierarchy(self):
        assert issubclass(EnrichmentTransportError, EnrichmentError)
        assert issubclass(EnrichmentResponseError, EnrichmentError)
        assert issubclass(EnrichmentParseError, EnrichmentError)

    def test_response_error_keeps_status(self):
        error = EnrichmentResponseError("Service error: 429", status_code=429)
        assert error.status_code == 429
        assert str(error) == "Service error: 429"


class TestRateLimitPolicy:
    def test_defaults(self):
        policy = RateLimitPolicy()
        assert (policy.max_attempts, policy.backoff_step, policy.delay_between_calls) == (4, 0.3, 0.2)

    def test_with_delay_keeps_retry_budget(self):
        policy = RateLimitPolicy(max_attempts=2, backoff_step=1.0).with_delay(0.5)
        assert (policy.max_attempts, policy.backoff_step, policy.delay_between_calls) == (2, 1.0, 0.5)

    @pytest.mark.asyncio
    async def test_zero_delay_pause_returns(self):
        await NO_WAIT.pause()


class TestEnrichmentRetryDecorator:
    @pytest.mark.asyncio
    async def test_successful_call(self):
        call_count = 0

        @enrichment_retry(NO_WAIT)
        async def successful_function():
            nonlocal call_count
            call_count += 1
            return "success"

        assert await successful_function() == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_transport_errors_retried_until_success(self):
        call_count = 0

        @enrichment_retry(NO_WAIT)
        async def flaky_function():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise httpx.ConnectTimeout("timed out")
            return "recovered"

        assert await flaky_function() == "recovered"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_budget_exhausted_reraises_last_error(self):
        call_count = 0

        @enrichment_retry(NO_WAIT)
        async def failing_function():
            nonlocal call_count
            call_count += 1
            raise httpx.ConnectError("refused")

        with pytest.raises(EnrichmentTransportError):
            await failing_function()
        assert call_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [EnrichmentResponseError("Service error: 500", status_code=500), EnrichmentParseError("not json")],
    )
    async def test_response_and_parse_errors_not_retried(self, error):
        call_count = 0

        @enrichment_retry(NO_WAIT)
        async def failing_function():
            nonlocal call_count
            call_count += 1
            raise error

        with pytest.raises(type(error)):
            await failing_function()
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_errors_wrapped_and_not_retried(self):
        call_count = 0

        @enrichment_retry(NO_WAIT)
        async def failing_function():
            nonlocal call_count
            call_count += 1
            raise KeyError("choices")

        with pytest.raises(EnrichmentError) as exc_info:
            await failing_function()
        assert type(exc_info.value) is EnrichmentError
        assert call_count == 1
