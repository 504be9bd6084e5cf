#!/usr/bin/env python3
"""
FairPrice - API Client Utilities
Copyright (c) 2025 FairPrice contributors
Licensed under the Apache License 2.0

Shared HTTP session handling and retry logic for upstream data providers.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple, Type

import requests

logger = logging.getLogger(__name__)


def retry_on_failure(
    max_attempts: int = 3,
    backoff_seconds: float = 1.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
):
    """
    Decorator for retrying failed calls with linear backoff.

    Waits ``backoff_seconds * attempt`` after each failed attempt (1s, 2s, ...)
    and re-raises the last error once ``max_attempts`` calls have failed.

    Args:
        max_attempts: Total number of calls, including the first
        backoff_seconds: Base delay multiplied by the attempt number
        exceptions: Exception types that trigger a retry; others propagate at once
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"Final attempt failed for {func.__name__}: {e}")
                        raise

                    wait_time = backoff_seconds * attempt
                    logger.warning(
                        f"Attempt {attempt} failed for {func.__name__}: {e}. Retrying in {wait_time}s"
                    )
                    time.sleep(wait_time)

        return wrapper

    return decorator


class BaseAPIClient:
    """
    Base class for JSON-over-HTTP provider clients.
    """

    def __init__(self, base_url: str, timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        """
        Initialize API client

        Args:
            base_url: Base URL for API
            timeout: Default timeout for requests in seconds
            session: Optional pre-built session (tests inject a mock here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or 30

        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": "FairPrice/0.1", "Accept": "application/json", "Accept-Encoding": "gzip, deflate"}
        )

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make HTTP request and raise for HTTP error statuses.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}" if endpoint else self.base_url

        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout

        try:
            logger.debug(f"Making {method} request to {url} (timeout: {kwargs['timeout']}s)")
            response = self.session.request(method, url, **kwargs)
            response.raise_for_status()
            return response

        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {method} {url} - {e}")
            raise

    def get(self, endpoint: str, params: Optional[Dict] = None) -> requests.Response:
        """Make GET request"""
        return self._make_request("GET", endpoint, params=params)

    def get_json(self, endpoint: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make GET request and return JSON response"""
        response = self.get(endpoint, params=params)
        return response.json()

    def close(self) -> None:
        """Close the HTTP session"""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
