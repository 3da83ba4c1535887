# tests/test_health_checker.py

"""Tests for the catalog source health checker service."""

import unittest
from unittest.mock import MagicMock, patch

from src.services.health_checker import (
    HealthChecker,
    HealthResult,
    check_source,
)
from src.sources.http_source import CatalogSource


def _source(source_id: str = "jsdelivr", fmt: str = "json") -> CatalogSource:
    """Build a minimal source."""
    return CatalogSource(source_id, source_id.title(), f"https://{source_id}/p", fmt)


def _session(
    status_code: int = 200,
    content: bytes = b'[{"name": "A"}]',
    content_type: str = "application/json",
) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    resp.headers = {"content-type": content_type}
    session = MagicMock()
    session.get.return_value = resp
    return session


class TestCheckSource(unittest.TestCase):
    """Tests for the per-source health check function."""

    def test_ok_status(self) -> None:
        """A fast 200 data response should return 'ok' status."""
        result = check_source(_source(), session=_session())
        self.assertEqual(result.status, "ok")
        self.assertEqual(result.status_code, 200)
        self.assertEqual(result.content_length, 15)
        self.assertFalse(result.is_html)
        self.assertTrue(result.preview.startswith("[{"))

    def test_down_on_http_error(self) -> None:
        """A non-2xx response should return 'down' status."""
        result = check_source(_source(), session=_session(status_code=403))
        self.assertEqual(result.status, "down")
        self.assertIn("403", result.message)

    def test_down_on_html(self) -> None:
        result = check_source(
            _source(),
            session=_session(content=b"<!DOCTYPE html><p>blocked</p>"),
        )
        self.assertEqual(result.status, "down")
        self.assertTrue(result.is_html)

    def test_down_on_empty_body(self) -> None:
        result = check_source(_source(), session=_session(content=b""))
        self.assertEqual(result.status, "down")
        self.assertEqual(result.message, "Empty body")

    def test_down_on_exception(self) -> None:
        """A network error should return 'down' status."""
        session = MagicMock()
        session.get.side_effect = ConnectionError("Connection refused")
        result = check_source(_source(), session=session)
        self.assertEqual(result.status, "down")
        self.assertIn("Connection refused", result.message)
        self.assertIsNone(result.status_code)

    @patch("src.services.health_checker.time")
    def test_slow_status(self, mock_time: MagicMock) -> None:
        """Latency above 5 s is reported as 'slow'."""
        mock_time.monotonic.side_effect = [0.0, 6.0]
        result = check_source(_source(), session=_session())
        self.assertEqual(result.status, "slow")

    def test_csv_source_sends_csv_headers(self) -> None:
        session = _session(content=b"name\nA\n", content_type="text/csv")
        check_source(_source("primary_csv", "csv"), session=session)
        headers = session.get.call_args.kwargs["headers"]
        self.assertIn("text/csv", headers["Accept"])


class TestHealthResult(unittest.TestCase):
    """Serialisation of health results."""

    def test_to_dict_keys(self) -> None:
        result = HealthResult(
            source_id="x",
            label="X",
            status="ok",
            latency_ms=12.345,
            message="",
            status_code=200,
        )
        data = result.to_dict()
        self.assertEqual(data["latencyMs"], 12.3)
        self.assertEqual(data["statusCode"], 200)
        self.assertIn("isHTML", data)


class TestHealthChecker(unittest.IsolatedAsyncioTestCase):
    """Tests for the concurrent HealthChecker."""

    @patch("src.services.health_checker.check_source")
    async def test_check_all_covers_every_source(
        self, mock_check: MagicMock,
    ) -> None:
        mock_check.side_effect = lambda src: HealthResult(
            source_id=src.id,
            label=src.label,
            status="ok",
            latency_ms=1.0,
            message="",
        )
        sources = [_source("a"), _source("b"), _source("c")]

        results = await HealthChecker(sources).check_all()

        self.assertEqual([r.source_id for r in results], ["a", "b", "c"])
        self.assertEqual(mock_check.call_count, 3)

    def test_defaults_to_configured_sources(self) -> None:
        self.assertEqual(len(HealthChecker().sources), 4)


if __name__ == "__main__":
    unittest.main()
