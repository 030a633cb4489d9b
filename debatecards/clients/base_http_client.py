import requests
import time
import random

from typing import Dict, Any, Optional
from urllib.parse import urljoin
from abc import ABC
from debatecards.utils.log import app_logger, sanitize_error
from debatecards.core.exceptions.exceptions import (
    ExternalAPIError,
    GatewayPaymentRequiredError,
    GatewayRateLimitedError,
)

class BaseHTTPClient(ABC):
    """Base HTTP client with common functionalities like POST, retries, and error handling"""

    SERVICE_NAME = "http"

    def __init__(self,
                 base_url: str,
                 api_key: Optional[str] = None,
                 timeout: float = 30, max_retries: int = 2,
                 retry_delay: float = 1.0,
                 content_type: Optional[str] = 'application/json',
                 accept: Optional[str] = 'application/json'
                 ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.content_type = content_type
        self.accept = accept
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = requests.Session()

        # setup default headers
        self._setup_default_headers()

    USER_AGENTS = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:123.0) Gecko/20100101 Firefox/123.0",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    ]

    def _setup_default_headers(self):
        """setup default headers for the client"""
        self.session.headers.update({
            'User-Agent': random.choice(self.USER_AGENTS),
            'Accept': self.accept,
            'Content-Type': self.content_type,
        })

        # add authentication header if api_key is provided
        if self.api_key:
            self._setup_authentication()

    def _setup_authentication(self):
        """setup authentication with API key (can be overridden)"""
        pass

    def _build_url(self, endpoint: str) -> str:
        """build full URL"""
        return urljoin(f"{self.base_url}/", endpoint.lstrip('/'))

    def _make_request(self, method: str, endpoint: str,
                     params: Optional[Dict] = None,
                     data: Optional[Dict] = None,
                     headers: Optional[Dict] = None) -> Dict[str, Any]:
        """do HTTP request, retrying network errors with exponential backoff.

        429 and 402 are surfaced immediately as typed errors: waiting out a rate limit
        inside a request handler would stall the caller.
        """
        url = self._build_url(endpoint)
        request_headers = headers or {}

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    json=data,
                    headers=request_headers,
                    timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                sanitized = sanitize_error(e)
                exc_type = type(e).__name__
                app_logger.error("request.failed", method=method, url=url, attempt=attempt + 1, exc_type=exc_type, error=sanitized)

                if attempt == self.max_retries:
                    raise ExternalAPIError(self.SERVICE_NAME, sanitized)

                # exponential backoff
                wait_time = self.retry_delay * (2 ** attempt)
                time.sleep(wait_time)
                continue

            if response.status_code == 429:
                retry_after = response.headers.get('Retry-After')
                app_logger.warning("request.rate_limited", url=url, attempt=attempt + 1, retry_after=retry_after)
                raise GatewayRateLimitedError(self.SERVICE_NAME, int(retry_after) if retry_after and retry_after.isdigit() else None)

            if response.status_code == 402:
                app_logger.warning("request.payment_required", url=url)
                raise GatewayPaymentRequiredError(self.SERVICE_NAME)

            if response.status_code >= 400:
                app_logger.error("request.status", method=method, url=url, status_code=response.status_code, body=response.text[:500])
                raise ExternalAPIError(self.SERVICE_NAME, f"HTTP {response.status_code}", status_code=response.status_code)

            # try to parse json response
            try:
                return response.json()
            except ValueError:
                app_logger.debug("request.parse_text", url=url, length=len(response.text))
                return {'text': response.text}

        raise ExternalAPIError(self.SERVICE_NAME, f"failed after {self.max_retries + 1} attempts")

    def post(self, endpoint: str, data: Optional[Dict] = None,
             headers: Optional[Dict] = None) -> Dict[str, Any]:
        """do POST request"""
        return self._make_request('POST', endpoint, data=data, headers=headers)

    def close(self):
        """close HTTP session"""
        self.session.close()
