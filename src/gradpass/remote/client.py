"""HTTP client for the check-in endpoint.

One call per operation, no retry loop: retries belong to the offline queue.
Every failure is mapped onto RemoteUnavailable or MalformedResponse so the
Recorder and the Reconciler only ever catch one family of errors.
"""
import logging
from dataclasses import dataclass

import requests

from gradpass.config import remote as remote_config
from gradpass.core.errors import MalformedResponse, RemoteUnavailable
from gradpass.core.models import CheckInRecord

logger = logging.getLogger("gradpass.remote")


@dataclass
class SubmitResult:
    """Confirmed write: server record id and whether it already existed."""
    id: str
    duplicate: bool = False


class CheckInClient:
    """Thin wrapper over POST/GET on the check-in endpoint."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.endpoint = endpoint or remote_config.CHECKINS_URL
        self.timeout = timeout if timeout is not None else remote_config.TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def submit(self, payload: dict) -> SubmitResult:
        """POST one check-in.

        Args:
            payload: Wire-shaped check-in (camelCase keys)

        Returns:
            SubmitResult with the stable server id

        Raises:
            RemoteUnavailable: Transport error or non-2xx status
            MalformedResponse: 2xx without a JSON confirmation
        """
        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteUnavailable(f"check-in endpoint unreachable: {e}") from e

        body = self._json_body(response)

        if body.get("ok") is not True:
            raise MalformedResponse(f"check-in not confirmed: {body!r}", response.status_code)
        record_id = body.get("id")
        if not record_id:
            raise MalformedResponse("check-in confirmation without id", response.status_code)

        return SubmitResult(id=str(record_id), duplicate=bool(body.get("duplicate", False)))

    def list_checkins(self, ceremony_id: str) -> list[CheckInRecord]:
        """GET the confirmed check-ins of a ceremony.

        Raises:
            RemoteUnavailable: Transport error or non-2xx status
            MalformedResponse: Body without ok/items
        """
        try:
            response = self.session.get(
                self.endpoint,
                params={"ceremonyId": ceremony_id},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteUnavailable(f"check-in endpoint unreachable: {e}") from e

        body = self._json_body(response)
        items = body.get("items")
        if body.get("ok") is not True or not isinstance(items, list):
            raise MalformedResponse(f"listing without items: {body!r}", response.status_code)

        try:
            return [CheckInRecord.from_dict(item) for item in items]
        except (KeyError, TypeError) as e:
            raise MalformedResponse(f"listing item missing field {e}", response.status_code) from e

    def _json_body(self, response: requests.Response) -> dict:
        if not response.ok:
            message = _error_message(response)
            logger.warning("check-in endpoint returned %s: %s", response.status_code, message)
            raise RemoteUnavailable(
                f"check-in endpoint returned {response.status_code}: {message}",
                response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponse("check-in endpoint returned non-JSON body", response.status_code) from e
        if not isinstance(body, dict):
            raise MalformedResponse(f"unexpected body type {type(body).__name__}", response.status_code)
        return body


def _error_message(response: requests.Response) -> str:
    """Pull error/message out of an error body, falling back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)
