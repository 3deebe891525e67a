"""
REST client for the ticket/roster service.

Uses urllib directly: the service speaks plain JSON over HTTP and the board
only needs four endpoints. Every transport, HTTP or decoding failure is
raised as ApiError so callers handle one exception type.
"""

import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from workboard.lib import validate
from workboard.lib.config import ClientConfig
from workboard.schedule.models import TeamMember, Ticket

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 300


class ApiError(Exception):
    """A request to the ticket service failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class WorkboardAPI:
    """Thin client over the ticket service endpoints the board consumes."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: int = 30,
                 ticket_limit: int = 500):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.ticket_limit = ticket_limit

    @classmethod
    def from_config(cls, config: ClientConfig) -> "WorkboardAPI":
        return cls(
            base_url=config.api_url,
            token=config.api_token,
            timeout=config.request_timeout_seconds,
            ticket_limit=config.ticket_limit,
        )

    def _request(self, method: str, path: str, params: Optional[dict] = None,
                 body: Optional[dict] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if params:
            url = f"{url}?{urlencode(params)}"

        headers = {"Accept": "application/json"}
        data = None
        if body is not None:
            data = json.dumps(body).encode()
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        req = Request(url, data=data, headers=headers, method=method)
        logger.debug(f"[API] {method} {url}")

        try:
            with urlopen(req, timeout=self.timeout) as response:
                raw = response.read()
        except HTTPError as e:
            detail = e.read().decode(errors="replace")[:MAX_ERROR_BODY] if e.fp else ""
            raise ApiError(f"{method} {path} failed: HTTP {e.code} {detail}".rstrip(), e.code) from None
        except URLError as e:
            raise ApiError(f"{method} {path} failed: {e.reason}") from None
        except TimeoutError:
            raise ApiError(f"{method} {path} timed out after {self.timeout}s") from None

        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ApiError(f"{method} {path} returned invalid JSON: {e}") from None

    def _envelope(self, payload: Any, schema_name: str, path: str) -> Any:
        try:
            validate.validate(payload, schema_name)
        except validate.ValidationError as e:
            raise ApiError(f"GET {path} returned unexpected payload: {e}") from None
        return payload

    def list_tickets(self, statuses: Optional[list[str]] = None) -> list[Ticket]:
        """GET /tickets, optionally filtered to ``statuses``."""
        params = {"limit": self.ticket_limit}
        if statuses:
            params["statuses"] = ",".join(statuses)

        payload = self._envelope(self._request("GET", "/tickets", params=params),
                                 "tickets_response", "/tickets")
        items = validate.valid_items(payload["tickets"], "ticket")
        logger.info(f"[API] Fetched {len(items)} ticket(s)")
        return [Ticket.from_dict(item) for item in items]

    def list_team_members(self) -> list[TeamMember]:
        """GET /team-members"""
        payload = self._envelope(self._request("GET", "/team-members"),
                                 "team_members_response", "/team-members")
        items = validate.valid_items(payload["teamMembers"], "team_member")
        return [TeamMember.from_dict(item) for item in items]

    def member_tasks(self, member_name: str) -> list[Ticket]:
        """GET /team-members/<name>/tasks (teamMembers or legacy empName match)."""
        path = f"/team-members/{quote(member_name, safe='')}/tasks"
        payload = self._envelope(self._request("GET", path), "member_tasks_response", path)
        items = validate.valid_items(payload["tasks"], "ticket")
        return [Ticket.from_dict(item) for item in items]

    def update_ticket(self, ticket_id: str, payload: dict) -> Optional[dict]:
        """PUT /tickets/<id> with a partial update (status and/or meta)."""
        logger.info(f"[API] Updating ticket {ticket_id}: {sorted(payload)}")
        result = self._request("PUT", f"/tickets/{quote(str(ticket_id), safe='')}", body=payload)
        if isinstance(result, dict):
            return result.get("ticket")
        return None
