"""Exit codes for the hwmonitor CLI.

- 0: Success
- 2: Monitor error (spawn failure, abnormal exit, bad output, timeout)
- 3: Invalid usage (bad arguments, invalid config)
- 4: Bootstrap failure (tool provisioning or runtime prerequisite)
"""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_MONITOR_ERROR = 2
EXIT_INVALID_USAGE = 3
EXIT_BOOTSTRAP_FAILURE = 4
