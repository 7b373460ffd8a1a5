"""
HTTP transport shared by the metadata provider adapters.
Provides common functionality for rate-limit backoff, request handling, and error parsing.
"""

import logging
import requests
from typing import Any, Dict, Optional

from utils.context import BatchContext

logger = logging.getLogger('prime_to_simkl')


class APIClient:
    """
    Thin requests wrapper owned by one provider adapter.

    Adapters hold an instance rather than inheriting from it; the adapter
    supplies its headers per call and catches the exception classes it
    configured here.
    """

    def __init__(self, api_name: str, base_url: str,
                 provider_key: str,
                 context: Optional[BatchContext] = None,
                 exception_class: type = Exception,
                 auth_exception_class: Optional[type] = None,
                 request_timeout: int = 30,
                 retry_delay: Optional[float] = None):
        """
        Initialize transport.

        Args:
            api_name: Human-readable service name for error messages
            base_url: URL prefix for endpoints
            provider_key: Key used for rate budgets and call counters
            context: Batch context (a fresh one if omitted)
            exception_class: Raised for transport and HTTP errors
            auth_exception_class: Raised for 401 (defaults to exception_class)
            request_timeout: Per-request timeout in seconds
            retry_delay: Backoff when a 429 has no Retry-After
                (defaults to the provider's rate window)
        """
        self.api_name = api_name
        self.base_url = base_url.rstrip('/')
        self.provider_key = provider_key
        self.context = context or BatchContext()
        self.exception_class = exception_class
        self.auth_exception_class = auth_exception_class or exception_class
        self.request_timeout = request_timeout
        self.retry_delay = retry_delay

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith('http://') or endpoint.startswith('https://'):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _retry_after(self, response: requests.Response) -> float:
        """Seconds to wait after a 429, from Retry-After or the configured default."""
        header = None
        if response.headers is not None:
            header = response.headers.get('Retry-After')
        if header:
            try:
                return max(float(header), 0.0)
            except (TypeError, ValueError):
                logger.debug(f"Ignoring unparseable Retry-After header: {header!r}")
        if self.retry_delay is not None:
            return float(self.retry_delay)
        return self.context.default_retry_delay(self.provider_key)

    def _parse_error_response(self, response: requests.Response) -> str:
        """
        Parse error message from response body.

        Handles common patterns:
        - Dict with 'message', 'error' or 'status_message' key
        - List with 'errorMessage' key

        Args:
            response: Failed HTTP response

        Returns:
            Extracted error message or raw response text
        """
        error_msg = response.text
        try:
            error_data = response.json()
            if isinstance(error_data, list) and error_data and isinstance(error_data[0], dict):
                error_msg = error_data[0].get('errorMessage', error_msg)
            elif isinstance(error_data, dict):
                error_msg = error_data.get('message', error_data.get('error',
                                           error_data.get('status_message', error_msg)))
        except Exception as e:
            logger.debug(f"Failed to parse error response JSON: {e}")
        return error_msg

    def _handle_response(self, response: requests.Response) -> Any:
        """
        Handle HTTP response, raising exceptions for errors.

        Args:
            response: HTTP response object

        Returns:
            Parsed JSON response or None for 204/404

        Raises:
            auth_exception_class: For 401
            exception_class: For other HTTP errors and unreadable bodies
        """
        if response.status_code == 401:
            raise self.auth_exception_class(f"{self.api_name} rejected credentials (401)")
        elif response.status_code == 404:
            return None
        elif response.status_code >= 400:
            error_msg = self._parse_error_response(response)
            raise self.exception_class(f"{self.api_name} API error {response.status_code}: {error_msg}")

        if response.status_code == 204:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise self.exception_class(f"{self.api_name} returned malformed JSON: {e}")

    def request(self, method: str, endpoint: str,
                params: Optional[Dict] = None,
                data: Optional[Dict] = None,
                form: Optional[Dict] = None,
                headers: Optional[Dict] = None) -> Any:
        """
        Make an HTTP request with rate-limit backoff and error handling.

        A 429 sleeps (through the batch context) and re-issues the identical
        request; repeated 429s keep retrying until the service answers with
        something else.

        Args:
            method: HTTP method (GET, POST, ...)
            endpoint: Path relative to base_url, or an absolute URL
            params: Query parameters
            data: Request body (JSON encoded)
            form: Request body (form encoded)
            headers: Request headers

        Returns:
            Response JSON data or None

        Raises:
            exception_class: If request fails
        """
        url = self._build_url(endpoint)
        self.context.record_call(self.provider_key)

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=data,
                data=form,
                timeout=self.request_timeout
            )
        except requests.exceptions.Timeout:
            raise self.exception_class(f"{self.api_name} request timeout after {self.request_timeout}s")
        except requests.exceptions.ConnectionError:
            raise self.exception_class(f"Could not connect to {self.api_name}")
        except requests.exceptions.RequestException as e:
            raise self.exception_class(f"{self.api_name} request failed: {e}")

        if response.status_code == 429:
            self.context.backoff(self.provider_key, self._retry_after(response))
            return self.request(method, endpoint, params=params, data=data, form=form, headers=headers)

        return self._handle_response(response)
