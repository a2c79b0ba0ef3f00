"""Tests for staking point lookups and the chunked batch fetcher."""
import pytest

from conftest import STAKING, FakeResponse, FakeSession
from seedboard import staking


class TestParsePoints:
    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            pytest.param({"points": 12}, 12, id="points"),
            pytest.param({"totalPoints": 7}, 7, id="total_points"),
            pytest.param({"stakingPoints": 3}, 3, id="staking_points"),
            pytest.param({"points": None, "totalPoints": 9}, 9, id="null_falls_through"),
            pytest.param({"points": 0, "totalPoints": 9}, 0, id="zero_is_not_null"),
            pytest.param({"points": "15"}, 15, id="numeric_string"),
            pytest.param({"points": 4.9}, 4, id="float_truncated"),
            pytest.param({"points": -5}, 0, id="negative_clamped"),
            pytest.param({"points": "lots"}, 0, id="garbage"),
            pytest.param({}, 0, id="no_field"),
            pytest.param([1, 2], 0, id="not_an_object"),
        ],
    )
    def test_parse(self, payload, expected):
        assert staking.parse_points(payload) == expected


@pytest.mark.asyncio
class TestFetchPoints:
    async def test_success(self):
        session = FakeSession(lambda url, params: FakeResponse(200, {"points": 42}))

        assert await staking.fetch_points(session, "17", "Mythic") == 42
        url, params = session.calls[0]
        assert url == f"{STAKING}/seeds/points"
        assert params == {"id": "17", "type": "Mythic"}

    @pytest.mark.parametrize("status", [404, 500, 429])
    async def test_http_failure_is_zero(self, status):
        session = FakeSession(lambda url, params: FakeResponse(status))
        assert await staking.fetch_points(session, "17", "Ancient") == 0

    @pytest.mark.parametrize("status", [201, 203])
    async def test_any_2xx_is_success(self, status):
        session = FakeSession(lambda url, params: FakeResponse(status, {"totalPoints": 9}))
        assert await staking.fetch_points(session, "17", "Mythic") == 9

    async def test_exception_is_zero(self):
        def boom(url, params):
            raise TimeoutError("slow")

        assert await staking.fetch_points(FakeSession(boom), "17", "Ancient") == 0


@pytest.mark.asyncio
class TestFetchPointsBatch:
    async def test_every_id_present_once(self):
        ids = [str(i) for i in range(25)]
        session = FakeSession(lambda url, params: FakeResponse(200, {"points": int(params["id"])}))

        result = await staking.fetch_points_batch(session, ids, "Mythic")

        assert sorted(result) == sorted(ids)
        assert all(v >= 0 for v in result.values())
        assert result["24"] == 24

    async def test_in_flight_capped_at_chunk_size(self):
        ids = [str(i) for i in range(25)]
        session = FakeSession(lambda url, params: FakeResponse(200, {"points": 1}))

        await staking.fetch_points_batch(session, ids, "Mythic", chunk_size=10)

        assert session.max_in_flight == 10
        assert len(session.calls) == 25

    async def test_failing_chunk_does_not_affect_others(self):
        ids = [str(i) for i in range(30)]

        def handler(url, params):
            token = int(params["id"])
            if 10 <= token < 20:
                raise ConnectionError("chunk two down")
            return FakeResponse(200, {"points": token + 1})

        result = await staking.fetch_points_batch(FakeSession(handler), ids, "Ancient")

        assert len(result) == 30
        assert all(result[str(i)] == 0 for i in range(10, 20))
        assert result["0"] == 1
        assert result["29"] == 30

    async def test_duplicate_ids_collapse(self):
        session = FakeSession(lambda url, params: FakeResponse(200, {"points": 5}))
        result = await staking.fetch_points_batch(session, ["1", "1", "2"], "Mythic")
        assert result == {"1": 5, "2": 5}
        assert len(session.calls) == 2

    async def test_empty_input(self):
        session = FakeSession(lambda url, params: FakeResponse(200, {"points": 5}))
        assert await staking.fetch_points_batch(session, [], "Mythic") == {}
