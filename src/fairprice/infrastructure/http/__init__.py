"""HTTP client base and retry helpers."""

from fairprice.infrastructure.http.api_client import BaseAPIClient, retry_on_failure

__all__ = ["BaseAPIClient", "retry_on_failure"]
