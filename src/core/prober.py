import asyncio
import logging
import time
from typing import Dict, Optional

import httpx

from config.config import Config
from contracts.probe_result import ProbeResult
from core.error_classifier import classify_exception, describe_failure

logger = logging.getLogger(__name__)

BLOCKED_STATUS_CODES = frozenset({403, 429})


def is_blocked(status_code: int) -> bool:
    """
    Check if a status code indicates the request was blocked as a bot or rate limited.
    """
    return status_code in BLOCKED_STATUS_CODES


def first_header_values(headers: httpx.Headers) -> Dict[str, str]:
    """
    Collapse response headers to the first value seen for each name, keeping the
    name as the server sent it.
    """
    collapsed = {}
    seen = set()
    for raw_key, raw_value in headers.raw:
        key = raw_key.decode(headers.encoding)
        if key.lower() in seen:
            continue
        seen.add(key.lower())
        collapsed[key] = raw_value.decode(headers.encoding)
    return collapsed


class Prober:
    """
    Issues a single outbound GET to a target URL and reports what came back.

    Every call uses its own client, follows redirects, and is bounded by one
    deadline covering connection, headers and body. Failures are returned as
    ``ProbeResult`` values and never raised.
    """

    def __init__(
        self,
        timeout: float = Config.PROBE_TIMEOUT_SECONDS,
        body_limit: int = Config.BODY_PREVIEW_LIMIT,
        user_agent: str = Config.PROBE_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Prober.

        Args:
            timeout (float): Total deadline in seconds for one probe.
            body_limit (int): Maximum number of characters kept in the body preview.
            user_agent (str): User-Agent header sent to the target.
            transport (Optional[httpx.AsyncBaseTransport]): Transport override, used in tests.
        """
        self.timeout = timeout
        self.body_limit = body_limit
        self.user_agent = user_agent
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self.transport,
        )

    def _failure(self, exc: BaseException, host: Optional[str] = None) -> ProbeResult:
        failure = classify_exception(exc, host=host)
        return ProbeResult.failure(describe_failure(failure, self.timeout))

    async def probe(self, target_url: str) -> ProbeResult:
        """
        Probe the target URL.

        Args:
            target_url (str): A URL that already passed validation.

        Returns:
            ProbeResult: The captured response, or the classified failure.
        """
        async with self._client() as client:
            try:
                request = client.build_request(
                    "GET", target_url, headers={"User-Agent": self.user_agent}
                )
            except Exception as e:
                logger.error(f"Error creating request for URL {target_url}: {e!r}")
                return self._failure(e)

            host = request.url.host
            deadline = time.monotonic() + self.timeout
            start = time.perf_counter()
            try:
                response = await asyncio.wait_for(
                    client.send(request, stream=True), timeout=self.timeout
                )
            except Exception as e:
                logger.error(f"Error testing URL {target_url}: {e!r}")
                return self._failure(e, host=host)

            try:
                response_time = int((time.perf_counter() - start) * 1000)
                return await self._read_response(
                    target_url, response, response_time, deadline
                )
            finally:
                await response.aclose()

    async def _read_response(
        self,
        target_url: str,
        response: httpx.Response,
        response_time: int,
        deadline: float,
    ) -> ProbeResult:
        status_code = response.status_code
        final_url = str(response.url)
        headers = first_header_values(response.headers)
        blocked = is_blocked(status_code)

        try:
            remaining = max(deadline - time.monotonic(), 0)
            await asyncio.wait_for(response.aread(), timeout=remaining)
            body = response.text
        except Exception as e:
            # The response itself arrived; report what we have.
            logger.error(f"Error reading response body for {target_url}: {e!r}")
            return ProbeResult(
                success=True,
                status_code=status_code,
                final_url=final_url,
                headers=headers,
                blocked=blocked,
            )

        truncated = len(body) > self.body_limit
        body_preview = body[: self.body_limit] if truncated else body

        logger.info(
            f"Probed {target_url}: status={status_code} final_url={final_url} "
            f"time={response_time}ms blocked={blocked}"
        )
        return ProbeResult(
            success=True,
            status_code=status_code,
            response_time=response_time,
            final_url=final_url,
            headers=headers,
            body_preview=body_preview,
            truncated=truncated,
            blocked=blocked,
        )
