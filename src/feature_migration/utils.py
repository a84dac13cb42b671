"""Common utilities for feature migration tooling."""
import logging
import os
from typing import Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# Configure logging
def setup_logging(name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Set up structured logging for a module.

    Args:
        name: Logger name (typically __name__)
        level: Logging level, as a number or a name like "DEBUG" (default: INFO)

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Only add handler if none exists
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger


def set_package_log_level(level: Union[int, str]) -> None:
    """Apply a level to every logger already created under this package."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            return

    prefix = __name__.rsplit('.', 1)[0]
    for name in list(logging.root.manager.loggerDict):
        if name == prefix or name.startswith(prefix + '.'):
            logging.getLogger(name).setLevel(level)


def create_session_with_retry(
    retries: int = 3,
    backoff_factor: float = 0.5,
    status_forcelist: tuple = (500, 502, 503, 504),
) -> requests.Session:
    """Create a requests session with retry logic.

    Args:
        retries: Number of retry attempts
        backoff_factor: Backoff multiplier between retries
        status_forcelist: HTTP status codes to retry on

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    retry = Retry(
        total=retries,
        read=retries,
        connect=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["POST"]
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def safe_request(
    url: str,
    method: str = "POST",
    logger: Optional[logging.Logger] = None,
    timeout: int = 10,
    **kwargs
) -> Optional[requests.Response]:
    """Make an HTTP request with retry logic and error handling.

    Args:
        url: URL to request
        method: HTTP method (default POST, webhooks are the only caller)
        logger: Logger instance for error reporting
        timeout: Request timeout in seconds
        **kwargs: Additional arguments for requests

    Returns:
        Response object or None on failure
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    session = create_session_with_retry()

    try:
        logger.debug(f"Making {method} request to {url}")
        response = session.request(method, url, timeout=timeout, **kwargs)
        response.raise_for_status()
        logger.debug(f"Request successful: {response.status_code}")
        return response
    except requests.exceptions.RequestException as e:
        logger.error(f"Request failed: {url} - {str(e)}")
        return None
    finally:
        session.close()


def read_text_file(filepath: str, logger: Optional[logging.Logger] = None) -> Optional[str]:
    """Read a text file, logging and returning None on failure.

    Args:
        filepath: Path to file
        logger: Logger instance for error reporting

    Returns:
        File content, or None if it could not be read
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return f.read()
    except UnicodeDecodeError:
        try:
            with open(filepath, 'r', encoding='latin-1') as f:
                logger.warning(f"File {filepath} read with latin-1 encoding")
                return f.read()
        except OSError as e:
            logger.error(f"Error scanning file {filepath}: {e}")
            return None
    except OSError as e:
        logger.error(f"Error scanning file {filepath}: {e}")
        return None


def safe_write_file(
    filepath: str,
    content: str,
    logger: Optional[logging.Logger] = None
) -> bool:
    """Safely write content to a file with error handling.

    Args:
        filepath: Path to output file
        content: Content to write
        logger: Logger instance for error reporting

    Returns:
        True on success, False on failure
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        # Ensure directory exists
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Write to temporary file first
        temp_filepath = f"{filepath}.tmp"
        with open(temp_filepath, 'w', encoding='utf-8') as f:
            f.write(content)

        # Atomic rename
        os.replace(temp_filepath, filepath)
        logger.debug(f"Successfully wrote file: {filepath}")
        return True
    except OSError as e:
        logger.error(f"Failed to write file {filepath}: {str(e)}")
        return False
