from typing import Any
from urllib.parse import urlsplit

from validators import hostname as validate_hostname
from validators.utils import ValidationError

from debatecards.core.exceptions.exceptions import InvalidInputError, InvalidTopicError


class Security:
    """Input validator for the public endpoints.

    Behavior:
    - A probe URL must be a string holding an absolute URL with an `http` or `https`
      scheme and a syntactically valid host (domain, IPv4/IPv6 or a simple host like `localhost`).
    - Non-string or empty values fail with `Invalid url`; anything else that is not http(s)
      fails with `URL must be http(s)`.
    - A topic must be a non-blank string.
    """

    ALLOWED_SCHEMES = ("http", "https")

    def is_valid_url(self, url: Any) -> bool:
        if not url or not isinstance(url, str):
            return False

        raw = url.strip()
        if not raw:
            return False

        try:
            parts = urlsplit(raw)
            host = parts.hostname
            # accessing .port raises ValueError for out-of-range or non-numeric ports
            parts.port
        except ValueError:
            return False

        if parts.scheme.lower() not in self.ALLOWED_SCHEMES or not host:
            return False

        try:
            return validate_hostname(host, may_have_port=False, maybe_simple=True) is True
        except (ValidationError, UnicodeError):
            return False

    def validate_url(self, url: Any) -> str:
        """Return the stripped URL or raise `InvalidInputError` with the client-facing message."""
        if not url or not isinstance(url, str):
            raise InvalidInputError("Invalid url")
        if not self.is_valid_url(url):
            raise InvalidInputError("URL must be http(s)")
        return url.strip()

    def validate_topic(self, topic: Any) -> str:
        if not topic or not isinstance(topic, str) or not topic.strip():
            raise InvalidTopicError()
        return topic.strip()
