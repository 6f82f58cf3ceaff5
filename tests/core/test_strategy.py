# ABOUTME: Tests for the ordered strategy chain
# ABOUTME: Short-circuit on first non-empty result, attempted-strategy bookkeeping and async strategies

import pytest

from seinfeld_tonight.core.strategy import Strategy, StrategyChain


class TestStrategyChain:
    def test_first_non_empty_result_wins(self):
        calls: list[str] = []

        def make(name: str, records: list[int]):
            def run() -> list[int]:
                calls.append(name)
                return records

            return Strategy(name, run)

        outcome = StrategyChain("numbers", [make("a", []), make("b", [1, 2]), make("c", [3])]).run_sync()

        assert outcome.records == [1, 2]
        assert outcome.strategy == "b"
        assert outcome.attempted == ["a", "b"]
        assert calls == ["a", "b"]

    def test_all_empty(self):
        outcome = StrategyChain("numbers", [Strategy("a", list), Strategy("b", list)]).run_sync()

        assert outcome.empty
        assert outcome.strategy is None
        assert outcome.attempted == ["a", "b"]

    def test_exceptions_propagate(self):
        def broken() -> list[int]:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            StrategyChain("numbers", [Strategy("broken", broken)]).run_sync()

    def test_async_strategy_rejected_by_run_sync(self):
        async def later() -> list[int]:
            return [1]

        chain = StrategyChain("numbers", [Strategy("later", later)])
        with pytest.raises(TypeError):
            chain.run_sync()

    @pytest.mark.asyncio
    async def test_run_mixes_sync_and_async(self):
        async def later() -> list[str]:
            return ["x"]

        outcome = await StrategyChain("letters", [Strategy("now", list), Strategy("later", later)]).run()

        assert outcome.records == ["x"]
        assert outcome.attempted == ["now", "later"]
