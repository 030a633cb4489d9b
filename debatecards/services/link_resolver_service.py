import random
import threading
import time
from typing import Callable, List, NamedTuple, Optional, Tuple
from urllib.parse import urljoin

import requests

from debatecards.clients.base_http_client import BaseHTTPClient
from debatecards.config.settings import settings
from debatecards.core.exceptions.exceptions import ProbeError, ProbeNetworkError, ProbeTimeoutError
from debatecards.middleware.security import Security
from debatecards.schemas.link_check import ProbeResult
from debatecards.services.doi import doi_url, extract_doi
from debatecards.services.status_policy import AcceptableStatusPolicy
from debatecards.utils.log import app_logger, sanitize_error

REDIRECT_STATUSES = (301, 302, 303, 307, 308)
MAX_REDIRECTS = 10


class ProbeStrategy(NamedTuple):
    name: str
    probe: Callable[[str], Tuple[int, str]]
    url: str
    # canonical strategies report their own url instead of the redirect target
    canonical: bool = False


class LinkResolverService:
    """Answers "is this citation link alive, and what is its canonical form?".

    - Tries, in order and stopping at the first acceptable status:
      HEAD, GET, then HEAD and GET against `https://doi.org/<doi>` when the link embeds a DOI.
    - Every attempt follows redirects and must finish within `timeout` seconds of wall-clock
      time, redirects included. A timeout or network error only ends that attempt and the
      chain moves on, so a resolution never takes longer than timeout x attempts.
    - Malformed input raises `InvalidInputError`. For any valid URL a `ProbeResult` is returned,
      never an exception.
    - Nothing is kept between calls: each attempt opens and closes its own session.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        verify: Optional[bool] = None,
        status_policy: Optional[AcceptableStatusPolicy] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
        user_agent: Optional[str] = None,
        doi_base: Optional[str] = None,
    ):
        self.timeout = settings.PROBE_TIMEOUT if timeout is None else timeout
        self.verify = settings.PROBE_VERIFY_TLS if verify is None else verify
        self.status_policy = status_policy or AcceptableStatusPolicy()
        self.session_factory = session_factory or requests.Session
        self.doi_base = doi_base
        self.security = Security()
        # many publishers reject the default python-requests agent
        self.user_agent = user_agent or random.choice(BaseHTTPClient.USER_AGENTS)

    def resolve(self, url: str) -> ProbeResult:
        target = self.security.validate_url(url)
        strategies = self._build_strategies(target)

        last_status: Optional[int] = None
        last_error: Optional[str] = None

        for strategy in strategies:
            try:
                status, final_url = strategy.probe(strategy.url)
            except ProbeError as e:
                last_error = e.message
                app_logger.debug(
                    "resolver.attempt_failed",
                    strategy=strategy.name,
                    url=strategy.url,
                    exc_type=type(e).__name__,
                    error=e.message,
                )
                continue

            app_logger.debug("resolver.attempt", strategy=strategy.name, url=strategy.url, status_code=status, final_url=final_url)
            if self.status_policy.is_acceptable(status):
                resolved = strategy.url if strategy.canonical else final_url
                app_logger.info("resolver.resolved", url=target, strategy=strategy.name, status_code=status, final_url=resolved)
                return ProbeResult(ok=True, status=status, final_url=resolved)

            if not strategy.canonical:
                last_status = status

        app_logger.info("resolver.exhausted", url=target, status_code=last_status, error=last_error)
        if last_status is not None:
            return ProbeResult(ok=False, status=last_status)
        return ProbeResult(ok=False, error=last_error or "Link could not be reached")

    def _build_strategies(self, url: str) -> List[ProbeStrategy]:
        strategies = [
            ProbeStrategy("head", self._probe_head, url),
            ProbeStrategy("get", self._probe_get, url),
        ]
        doi = extract_doi(url)
        if doi:
            canonical = doi_url(doi, self.doi_base)
            # a link that already is the doi.org form was probed above
            if canonical != url:
                strategies += [
                    ProbeStrategy("doi_head", self._probe_head, canonical, canonical=True),
                    ProbeStrategy("doi_get", self._probe_get, canonical, canonical=True),
                ]
        return strategies

    def _probe_head(self, url: str) -> Tuple[int, str]:
        return self._attempt("HEAD", url)

    def _probe_get(self, url: str) -> Tuple[int, str]:
        # stream so the body is never downloaded; only the status matters
        return self._attempt("GET", url, stream=True)

    def _attempt(self, method: str, url: str, stream: bool = False) -> Tuple[int, str]:
        """Run one request under a wall-clock deadline.

        requests only bounds the connect and each socket read, so a server dripping its
        headers could hold a read open indefinitely. The request runs in a worker thread;
        when the deadline passes the attempt is abandoned and its session closed.
        """
        deadline = time.monotonic() + self.timeout
        session = self.session_factory()
        session.headers.update({"User-Agent": self.user_agent, "Accept": "*/*"})

        outcome = {}
        done = threading.Event()
        abandoned = threading.Event()

        def _run():
            try:
                outcome["result"] = self._follow(session, method, url, deadline, stream)
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()
                if abandoned.is_set():
                    session.close()

        worker = threading.Thread(target=_run, name=f"resolver-{method.lower()}", daemon=True)
        worker.start()

        if not done.wait(self.timeout):
            abandoned.set()
            session.close()
            raise ProbeTimeoutError(url, f"no complete answer within {self.timeout}s")

        session.close()
        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    def _follow(self, session: requests.Session, method: str, url: str,
                deadline: float, stream: bool) -> Tuple[int, str]:
        """Send `method` to `url`, following redirects by hand so each hop gets only the remaining budget."""
        current = url
        for _ in range(MAX_REDIRECTS + 1):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ProbeTimeoutError(url, f"redirect chain exceeded {self.timeout}s")

            resp = self._send(session, method, current, remaining, stream)
            try:
                location = resp.headers.get("Location") if resp.status_code in REDIRECT_STATUSES else None
                reached = resp.url or current
                if not location:
                    return resp.status_code, reached
                app_logger.debug("resolver.redirect", url=current, status_code=resp.status_code, location=location)
                current = urljoin(reached, location)
            finally:
                resp.close()

        raise ProbeNetworkError(url, f"more than {MAX_REDIRECTS} redirects")

    def _send(self, session: requests.Session, method: str, url: str,
              timeout: float, stream: bool) -> requests.Response:
        try:
            return session.request(
                method=method,
                url=url,
                timeout=timeout,
                allow_redirects=False,
                verify=self.verify,
                stream=stream,
            )
        except requests.Timeout as e:
            raise ProbeTimeoutError(url, sanitize_error(e))
        except requests.RequestException as e:
            raise ProbeNetworkError(url, sanitize_error(e))
        except (ValueError, UnicodeError) as e:
            # urllib3 rejects some hosts/labels after the URL passed validation
            raise ProbeNetworkError(url, sanitize_error(e))
