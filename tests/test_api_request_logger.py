"""Tests for opt-in upstream request logging."""

import logging

import pytest

from transit_departures.adapters.api_request_logger import (
    log_api_request,
    redact_url,
    request_logging_enabled,
)

LOGGER_NAME = "transit_departures.adapters.api_request_logger"
TRIP_POINTS_URL = (
    "https://api.mrn.cityway.fr/media/api/v1/en/TripPoints/BoundingBox"
    "?MinimumLatitude=49.44&MaximumLatitude=49.45&PointTypes=5"
)


class TestRequestLoggingEnabled:
    """Tests for the TD_LOG_REQUESTS switch."""

    def test_unset_means_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Given TD_LOG_REQUESTS unset, when checking, then logging is off."""
        monkeypatch.delenv("TD_LOG_REQUESTS", raising=False)

        assert request_logging_enabled() is False

    @pytest.mark.parametrize(
        ("value", "expected"), [("true", True), (" TRUE ", True), ("1", True), ("no", False)]
    )
    def test_truthy_values_enable_logging(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
    ) -> None:
        """Given TD_LOG_REQUESTS set, when checking, then only truthy values enable logging."""
        monkeypatch.setenv("TD_LOG_REQUESTS", value)

        assert request_logging_enabled() is expected


class TestRedactUrl:
    """Tests for masking credentials in request URLs."""

    def test_url_without_credentials_is_untouched(self) -> None:
        """Given a Cityway lookup URL, when redacting, then it is returned as is."""
        assert redact_url(TRIP_POINTS_URL) == TRIP_POINTS_URL

    def test_credential_parameters_are_masked(self) -> None:
        """Given a feed URL with an apiKey, when redacting, then only the key value is masked."""
        redacted = redact_url("https://feeds.example/tcar.pb?apiKey=s3cret&format=pb")

        assert redacted == "https://feeds.example/tcar.pb?apiKey=%2A%2A%2A&format=pb"
        assert "s3cret" not in redacted


class TestLogApiRequest:
    """Tests for log_api_request."""

    def test_disabled_logging_emits_nothing(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Given logging disabled, when a download is logged, then no record is emitted."""
        monkeypatch.delenv("TD_LOG_REQUESTS", raising=False)

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_api_request("Feed download", "https://example.com/gtfs.zip")

        assert caplog.records == []

    def test_cityway_call_is_logged_with_headers(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Given logging enabled, when a Cityway call is logged, then the upstream, URL and
        headers appear in one record."""
        monkeypatch.setenv("TD_LOG_REQUESTS", "true")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_api_request(
                "Cityway trip point lookup", TRIP_POINTS_URL, headers={"Accept": "application/json"}
            )

        assert [record.getMessage() for record in caplog.records] == [
            f"Cityway trip point lookup request: GET {TRIP_POINTS_URL} [Accept=application/json]"
        ]

    @pytest.mark.parametrize(
        ("header", "secret"),
        [
            ("Authorization", "Bearer secret-token"),
            ("Cookie", "session=abc123"),
            ("X-API-Key", "secret-key"),
        ],
    )
    def test_sensitive_headers_are_masked(
        self,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
        header: str,
        secret: str,
    ) -> None:
        """Given a sensitive header, when logging, then its value is masked."""
        monkeypatch.setenv("TD_LOG_REQUESTS", "true")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_api_request(
                "Feed download", "https://example.com/gtfs.zip", headers={header: secret}
            )

        message = caplog.records[0].getMessage()
        assert f"{header}=***" in message
        assert secret not in message
