"""completion_stream.config.defaults
=================================

Central place for the small, stable default values used by the stream
accumulator. They can be overridden via environment variables, an optional
JSON config file or in-code overrides (see ``completion_stream.config``).

This module intentionally imports nothing from the rest of the package to
avoid circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Protocol handling ----

# When True, a delta arriving for an already-finished choice terminates the
# stream instead of being logged and ignored.
STRICT_FINISH_DEFAULT = False

# ---- Logging ----

# ``None`` defers to the logger's current level (INFO unless reconfigured).
LOG_LEVEL_DEFAULT = None
JSON_LOGS_DEFAULT = True

# ---- Tracing ----

TRACE_ENABLED_DEFAULT = True

# ---- Environment variable names ----

ENV_PREFIX = "COMPLETION_STREAM_"
ENV_STRICT_FINISH = ENV_PREFIX + "STRICT_FINISH"
ENV_LOG_LEVEL = ENV_PREFIX + "LOG_LEVEL"
ENV_JSON_LOGS = ENV_PREFIX + "JSON_LOGS"
ENV_TRACE = ENV_PREFIX + "TRACE"
ENV_CONFIG_FILE = ENV_PREFIX + "CONFIG_FILE"

# SSE sentinel that terminates an OpenAI-style chat completion stream.
SSE_DONE_SENTINEL = "[DONE]"
