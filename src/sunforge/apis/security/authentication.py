import logging
import secrets
from http import HTTPStatus
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from sunforge.config.settings import settings

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


class Authenticator:
    """Authenticates field devices posting readings with a shared API key."""

    def __init__(self, api_key: str = settings.IOT_API_KEY) -> None:
        self.logger = logging.getLogger("api")
        self.api_key: str = api_key
        enabled_string = "enabled" if self.should_authenticate() else "disabled"
        self.logger.info("IoT ingest authentication is %s", enabled_string)

    def should_authenticate(self) -> bool:
        return bool(self.api_key)

    def get_scheme(self):
        async def validate_api_key(
            api_key: Optional[str] = Security(api_key_header),
        ) -> None:
            if not self.should_authenticate():
                return
            if api_key is None or not secrets.compare_digest(
                api_key.encode(), self.api_key.encode()
            ):
                self.logger.warning("Rejected request with invalid API key")
                raise HTTPException(
                    status_code=HTTPStatus.UNAUTHORIZED, detail="Unauthorized"
                )

        return validate_api_key
