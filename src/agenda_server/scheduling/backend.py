"""Calendar backends.

This module provides the CalendarBackend interface and the Google Calendar
implementation. The Google client library is blocking, so every request runs
in a worker thread with a bounded timeout. The API service handle is built
lazily on first use (including OAuth authorization) and then shared.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

from google.auth.exceptions import GoogleAuthError, RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from agenda_server.errors import AuthRequired, BackendUnavailable
from agenda_server.scheduling.types import CalendarEvent

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]

# Google caps events().list page size at 2500; 250 is the API default
PAGE_SIZE = 250


class CalendarBackend(ABC):
    """Semantic contract of a remote calendar store.

    Implementations must:
    - return events overlapping [time_min, time_max), ordered by start
    - expand recurring events into individual instances
    - exclude deleted/cancelled events
    - raise BackendUnavailable / AuthRequired on failure
    """

    name: str = "abstract"

    @abstractmethod
    async def list_events(
        self,
        time_min: datetime,
        time_max: datetime | None = None,
        max_results: int | None = None,
    ) -> list[CalendarEvent]:
        """List events overlapping [time_min, time_max).

        Args:
            time_min: Inclusive lower bound (timezone-aware)
            time_max: Exclusive upper bound, or None for no bound
            max_results: Maximum number of events, or None for all

        Returns:
            Events ordered by start time
        """

    @abstractmethod
    async def insert_event(self, event: CalendarEvent) -> CalendarEvent:
        """Insert an event and return it with its backend-assigned id."""

    async def check_connection(self) -> bool:
        """Report whether the backend is ready to serve requests."""
        return True

    async def close(self) -> None:
        """Release backend resources."""


class GoogleCalendarBackend(CalendarBackend):
    """Google Calendar v3 backend.

    Attributes:
        calendar_id: Calendar to operate on (usually "primary")
        default_timezone: Timezone for date-only events without one
        token_file: Where the authorized user token is cached
        interactive: Whether the installed-app OAuth flow may be started
    """

    name = "google"

    def __init__(
        self,
        calendar_id: str,
        default_timezone: str,
        token_file: Path,
        client_id: str | None = None,
        client_secret: str | None = None,
        client_secrets_file: Path | None = None,
        interactive: bool = True,
        timeout_seconds: float = 30.0,
        auth_timeout_seconds: float = 300.0,
    ) -> None:
        self.calendar_id = calendar_id
        self.default_timezone = default_timezone
        self.token_file = token_file
        self.client_id = client_id
        self.client_secret = client_secret
        self.client_secrets_file = client_secrets_file
        self.interactive = interactive
        self.timeout_seconds = timeout_seconds
        self.auth_timeout_seconds = auth_timeout_seconds

        self._service: Any = None
        self._init_lock = asyncio.Lock()
        # httplib2 connections are not thread-safe. The lock is held by the
        # worker thread, so a request abandoned on timeout still blocks the next
        self._request_lock = threading.Lock()

    # ========== Authorization ==========

    def _create_flow(self) -> InstalledAppFlow:
        """Create the installed-app OAuth flow from settings.

        Raises:
            AuthRequired: If no client configuration is available
        """
        if self.client_id and self.client_secret:
            client_config = {
                "installed": {
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": "https://oauth2.googleapis.com/token",
                    "redirect_uris": ["http://localhost"],
                }
            }
            return InstalledAppFlow.from_client_config(client_config, SCOPES)

        if self.client_secrets_file and self.client_secrets_file.exists():
            return InstalledAppFlow.from_client_secrets_file(
                str(self.client_secrets_file), SCOPES
            )

        raise AuthRequired(
            "Google Calendar client credentials are not configured",
            details={"token_file": str(self.token_file)},
        )

    def _save_token(self, credentials: Credentials) -> None:
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            self.token_file.write_text(credentials.to_json(), encoding="utf-8")
            logger.debug(f"Saved Google token to {self.token_file}")
        except OSError as e:
            logger.warning(f"Failed to save Google token to {self.token_file}: {e}")

    def _load_credentials(self) -> Credentials:
        """Load, refresh or interactively obtain credentials (blocking).

        Raises:
            AuthRequired: If no valid credential can be obtained
        """
        credentials = None
        if self.token_file.exists():
            try:
                credentials = Credentials.from_authorized_user_file(
                    str(self.token_file), SCOPES
                )
            except (ValueError, OSError) as e:
                logger.warning(f"Ignoring unreadable token file {self.token_file}: {e}")

        if credentials and credentials.valid:
            return credentials

        if credentials and credentials.expired and credentials.refresh_token:
            try:
                credentials.refresh(Request())
                self._save_token(credentials)
                logger.info("Refreshed expired Google credentials")
                return credentials
            except RefreshError as e:
                logger.warning(f"Failed to refresh Google credentials: {e}")

        if not self.interactive:
            raise AuthRequired("No valid Google Calendar credential and interactive auth is disabled")

        flow = self._create_flow()
        logger.info("Starting interactive Google Calendar authorization")
        try:
            credentials = flow.run_local_server(
                port=0, timeout_seconds=int(self.auth_timeout_seconds)
            )
        except Exception as e:
            raise AuthRequired(f"Interactive authorization failed: {e}") from e

        if credentials is None:
            raise AuthRequired("Interactive authorization did not complete")

        self._save_token(credentials)
        return credentials

    def _build_service(self) -> Any:
        credentials = self._load_credentials()
        return build("calendar", "v3", credentials=credentials, cache_discovery=False)

    async def _get_service(self) -> Any:
        """Get the shared API service handle, building it on first use."""
        if self._service is not None:
            return self._service

        async with self._init_lock:
            if self._service is None:
                try:
                    self._service = await asyncio.wait_for(
                        asyncio.to_thread(self._build_service),
                        timeout=self.auth_timeout_seconds,
                    )
                except asyncio.TimeoutError as e:
                    raise AuthRequired("Google Calendar authorization timed out") from e
                logger.info(f"Google Calendar service initialized for calendar {self.calendar_id}")
        return self._service

    # ========== Requests ==========

    def _execute_locked(self, request: Any) -> dict[str, Any]:
        with self._request_lock:
            return request.execute()

    async def _execute(self, operation: str, request: Any) -> dict[str, Any]:
        """Execute an API request in a worker thread.

        Raises:
            AuthRequired: On 401/403 or credential refresh failures
            BackendUnavailable: On timeouts, transport and other HTTP errors
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._execute_locked, request),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise BackendUnavailable(
                f"Calendar {operation} timed out after {self.timeout_seconds}s"
            ) from e
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            logger.error(f"Calendar API error during {operation}: {status} {e}")
            if status in (401, 403):
                raise AuthRequired(
                    f"Calendar rejected the credential ({status})",
                    details={"status": status},
                ) from e
            raise BackendUnavailable(
                f"Calendar {operation} failed ({status})", details={"status": status}
            ) from e
        except (RefreshError, GoogleAuthError) as e:
            raise AuthRequired(f"Calendar credential is no longer valid: {e}") from e
        except (HttpLib2Error, OSError) as e:
            logger.error(f"Calendar transport error during {operation}: {e}")
            raise BackendUnavailable(f"Calendar {operation} failed: {e}") from e

    async def list_events(
        self,
        time_min: datetime,
        time_max: datetime | None = None,
        max_results: int | None = None,
    ) -> list[CalendarEvent]:
        service = await self._get_service()

        params: dict[str, Any] = {
            "calendarId": self.calendar_id,
            "timeMin": time_min.isoformat(),
            "singleEvents": True,
            "showDeleted": False,
            "orderBy": "startTime",
        }
        if time_max is not None:
            params["timeMax"] = time_max.isoformat()

        events: list[CalendarEvent] = []
        page_token = None
        while True:
            page_size = PAGE_SIZE
            if max_results is not None:
                page_size = min(PAGE_SIZE, max_results - len(events))
            page_params = dict(params, maxResults=page_size)
            if page_token:
                page_params["pageToken"] = page_token

            response = await self._execute("list", service.events().list(**page_params))

            for item in response.get("items", []):
                if item.get("status") == "cancelled":
                    continue
                events.append(CalendarEvent.from_google_event(item, self.default_timezone))

            page_token = response.get("nextPageToken")
            if not page_token:
                break
            if max_results is not None and len(events) >= max_results:
                break

        logger.debug(f"Listed {len(events)} events from {time_min} to {time_max}")
        return events if max_results is None else events[:max_results]

    async def insert_event(self, event: CalendarEvent) -> CalendarEvent:
        service = await self._get_service()
        request = service.events().insert(
            calendarId=self.calendar_id, body=event.to_google_event()
        )
        response = await self._execute("insert", request)
        created = CalendarEvent.from_google_event(response, self.default_timezone)
        logger.info(f"Inserted event {created.event_id}: {created.summary}")
        return created

    async def check_connection(self) -> bool:
        return self._service is not None
