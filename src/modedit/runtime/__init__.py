"""Process-wide services: telemetry and the explicit editor session state."""
