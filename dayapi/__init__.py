"""DayData telemetry API."""
