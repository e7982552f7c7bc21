import logging
from typing import Any, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout
from requests.models import Response

from sunforge.config.settings import settings


class RequestHandler:
    """Sends JSON requests to REST services over a shared session.

    Transport failures are logged and raised as RequestException. Error statuses
    raise HTTPError, which is a RequestException too, so callers only need to
    handle the one type.
    """

    def __init__(
        self,
        timeout: float = settings.REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout: float = timeout
        self.session: requests.Session = session or requests.Session()
        self.logger = logging.getLogger("request_handler")

    def request(
        self,
        method: str,
        url: str,
        json_body: Any = None,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
        request_timeout: Optional[float] = None,
    ) -> Response:
        try:
            response: Response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                params=params,
                timeout=request_timeout or self.timeout,
            )
        except (Timeout, ConnectionError) as e:
            self.logger.error("%s %s failed: %s", method, url, type(e).__name__)
            raise RequestException(f"{method} {url} failed") from e
        except RequestException:
            raise
        except Exception as e:
            self.logger.exception("Unexpected error during %s %s", method, url)
            raise RequestException(f"{method} {url} failed") from e

        if not response.ok:
            self.logger.error(
                "%s %s returned %d: %s",
                method,
                url,
                response.status_code,
                response.text[:200],
            )
            response.raise_for_status()
        return response

    def get(self, url: str, **kwargs) -> Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> Response:
        return self.request("POST", url, **kwargs)

    def patch(self, url: str, **kwargs) -> Response:
        return self.request("PATCH", url, **kwargs)
