"""
Logging setup for the Media Vault API.
Configures the root logger once; modules use logging.getLogger(__name__).
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the API process and Lambda handlers.
    
    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    # boto3 is noisy at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    _configured = True
