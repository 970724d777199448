from __future__ import annotations

import os

# Must be set before modedit.runtime.telemetry configures telelog on import.
os.environ.setdefault("MODEDIT_DISABLE_CONSOLE", "1")
