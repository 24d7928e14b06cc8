"""Custom filters for uvicorn access logging."""

import logging


class ExcludePathsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Prevents log noise from liveness probes and Prometheus scraping:
    requests to paths like /metrics and /health will not appear in
    uvicorn's access logs.
    """

    def __init__(self, excluded_paths: list[str] | None = None) -> None:
        """
        Args:
            excluded_paths: Paths to drop. Defaults to LOG_EXCLUDED_PATHS.
        """
        super().__init__()
        if excluded_paths is None:
            from chatrelay.settings import app_settings

            excluded_paths = app_settings.LOG_EXCLUDED_PATHS
        self.excluded_paths = excluded_paths

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if the log record should be logged.

        Args:
            record: The log record to evaluate.

        Returns:
            False if the request path is in excluded paths, True otherwise.
        """
        message = record.getMessage()
        return not any(
            f"{path} " in message or message.endswith(path)
            for path in self.excluded_paths
        )
