"""Failures raised while turning a log into temperature readings.

Every error carries a stable ``code`` so the HTTP layer and the logs can
report the failure kind without matching on message text. None of them is
fatal: callers fall back to mock data.
"""

from __future__ import annotations


class TelemetryError(Exception):
    code = "TelemetryError"


class LogNotFoundError(TelemetryError):
    code = "NotFound"


class LogReadError(TelemetryError):
    code = "ReadError"


class InsufficientDataError(TelemetryError):
    code = "InsufficientData"


class HeaderNotFoundError(TelemetryError):
    code = "HeaderNotFound"


class NoValidSamplesError(TelemetryError):
    code = "NoValidSamples"


class NoTemperatureColumnsError(TelemetryError):
    code = "NoTemperatureColumns"
