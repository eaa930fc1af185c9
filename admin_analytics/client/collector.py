"""Client-side activity collector.

One ``ActivityCollector`` is created per page load. It reports page visits,
activities and security events to the tracking API over an
``httpx.AsyncClient``. While offline, activities are queued in memory and
replayed in order on reconnect; sends that fail are kept in the store
(newest ``FAILED_REQUESTS_CAP`` only) and retried after the queue drains.
No method raises on a failed send.
"""
import asyncio
import logging
import time
from collections import deque
from typing import Any, Callable, Optional

import httpx

from admin_analytics.client.fingerprint import PageContext
from admin_analytics.client.store import FAILED_KEY, SESSION_KEY, MemoryStore
from admin_analytics.core.constants import (
    CLIENT_SESSION_MAX_AGE_SECONDS,
    FAILED_REQUESTS_CAP,
    HEARTBEAT_INTERVAL_SECONDS,
    SESSION_HEADER,
    ActivityCategory,
    ActivityType,
    SecurityEventType,
    Severity,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/activity-tracking"
LOGIN_ENDPOINT = f"{API_PREFIX}/login"
ACTIVITY_ENDPOINT = f"{API_PREFIX}/activity"
PAGE_VISIT_ENDPOINT = f"{API_PREFIX}/page-visit"
SECURITY_EVENT_ENDPOINT = f"{API_PREFIX}/security-event"


class ActivityCollector:
    def __init__(
        self,
        base_url: str,
        page: PageContext,
        store=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
        online: bool = True,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
        failed_cap: int = FAILED_REQUESTS_CAP,
        clock: Callable[[], float] = time.time,
        timeout: float = 10.0,
    ):
        self.page = page
        self.store = store if store is not None else MemoryStore()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.online = online
        self.heartbeat_interval = heartbeat_interval
        self.failed_cap = failed_cap
        self._clock = clock

        self.admin_id: Optional[int] = None
        self.session_id: Optional[int] = None
        self.session_token: Optional[str] = None

        self.queue: deque = deque()
        self.page_started_at = clock()
        self.failed_sends = 0
        self.dropped_sends = 0
        self._flushing = False
        self._heartbeat_task: Optional[asyncio.Task] = None

        self.restore_session()

    # Session

    def set_session(self, admin_id: int, session_id: int, session_token: str) -> None:
        self.admin_id = admin_id
        self.session_id = session_id
        self.session_token = session_token
        self.store.set(SESSION_KEY, {
            "admin_id": admin_id,
            "session_id": session_id,
            "session_token": session_token,
            "timestamp": self._clock(),
        })

    def restore_session(self) -> Optional[dict]:
        """Load the stored session unless it is older than 24 hours."""
        data = self.store.get(SESSION_KEY)
        if not data:
            return None
        if self._clock() - data.get("timestamp", 0) >= CLIENT_SESSION_MAX_AGE_SECONDS:
            self.store.delete(SESSION_KEY)
            return None
        self.admin_id = data.get("admin_id")
        self.session_id = data.get("session_id")
        self.session_token = data.get("session_token")
        return data

    def clear_session(self) -> None:
        self.admin_id = self.session_id = self.session_token = None
        self.store.delete(SESSION_KEY)

    async def login(self, admin_id: int) -> Optional[dict]:
        result = await self.send_request("POST", LOGIN_ENDPOINT, {"admin_id": admin_id}, store_on_failure=False)
        if result and result.get("session_token"):
            self.set_session(admin_id, result["session_id"], result["session_token"])
        return result

    # Page lifecycle

    async def start(self) -> None:
        await self.track_page_visit()
        await self.track_activity(
            ActivityType.PAGE_LOAD.value,
            ActivityCategory.NAVIGATION.value,
            f"Loaded page: {self.page.title}",
        )
        self.start_heartbeat()

    async def on_visibility_change(self, hidden: bool) -> None:
        if hidden:
            await self.track_activity(
                ActivityType.PAGE_HIDDEN.value, ActivityCategory.NAVIGATION.value, "Page became hidden"
            )
        else:
            await self.track_activity(
                ActivityType.PAGE_VISIBLE.value, ActivityCategory.NAVIGATION.value, "Page became visible"
            )
            self.page_started_at = self._clock()

    async def on_unload(self) -> None:
        await self.track_page_exit()
        await self.flush_queue()
        await self.stop_heartbeat()

    def on_offline(self) -> None:
        self.online = False

    async def on_online(self) -> None:
        self.online = True
        await self.flush_queue()
        await self.retry_failed_requests()
        await self.report_tracking_failures()

    async def on_error(
        self,
        message: str,
        error_type: str = "JAVASCRIPT_ERROR",
        stack: Optional[str] = None,
        context: Optional[dict] = None,
    ) -> None:
        await self.track_error(error_type, message, stack, context)

    async def on_unhandled_rejection(self, reason: Optional[str] = None, stack: Optional[str] = None) -> None:
        await self.track_error("PROMISE_REJECTION", reason or "Unhandled promise rejection", stack)

    async def aclose(self) -> None:
        await self.stop_heartbeat()
        if self._owns_client:
            await self.client.aclose()

    # Page visits

    async def track_page_visit(self) -> Optional[dict]:
        payload = {
            "page_name": self.page.title,
            "page_url": self.page.url,
            "visit_duration": 0,
            "referrer_url": self.page.referrer,
            **self.page.fingerprint(),
        }
        return await self.send_request("POST", PAGE_VISIT_ENDPOINT, payload)

    async def track_page_exit(self) -> Optional[dict]:
        payload = {
            "page_name": self.page.title,
            "page_url": self.page.url,
            "visit_duration": int(self._clock() - self.page_started_at),
        }
        return await self.send_request("POST", PAGE_VISIT_ENDPOINT, payload)

    # Activities

    async def track_activity(
        self,
        activity_type: str,
        activity_category: str,
        description: str,
        target_resource: Optional[str] = None,
        target_id: Optional[Any] = None,
        old_values: Optional[Any] = None,
        new_values: Optional[Any] = None,
        additional_data: Optional[Any] = None,
    ) -> None:
        activity = {
            "activity_type": activity_type,
            "activity_category": activity_category,
            "description": description,
            "target_resource": target_resource,
            "target_id": target_id,
            "old_values": old_values,
            "new_values": new_values,
            "additional_data": additional_data,
        }
        # Queue behind pending activities so replay order matches capture order.
        if not self.online or self._flushing:
            self.queue.append(activity)
            return
        await self.send_request("POST", ACTIVITY_ENDPOINT, activity)

    async def flush_queue(self) -> int:
        """Send queued activities oldest first; returns how many were sent."""
        if self._flushing:
            return 0
        sent = 0
        self._flushing = True
        try:
            while self.queue:
                activity = self.queue.popleft()
                await self.send_request("POST", ACTIVITY_ENDPOINT, activity)
                sent += 1
        finally:
            self._flushing = False
        return sent

    async def track_click(self, data_track: str, text: str = "") -> None:
        action, _, category = data_track.partition(":")
        await self.track_activity(
            action, category or ActivityCategory.INTERACTION.value, f"Clicked on {text.strip()}"
        )

    async def track_form_submit(self, form_id: Optional[str] = None, form_class: Optional[str] = None) -> None:
        form_name = form_id or form_class or "unnamed_form"
        await self.track_activity(
            ActivityType.FORM_SUBMIT.value, ActivityCategory.INTERACTION.value, f"Form submitted: {form_name}"
        )

    async def track_file_upload(self, filenames: list[str]) -> None:
        if not filenames:
            return
        await self.track_activity(
            ActivityType.FILE_UPLOAD.value, ActivityCategory.INTERACTION.value, f"File uploaded: {filenames[0]}"
        )

    async def track_data_change(
        self,
        table_name: str,
        record_id: Any,
        operation: str,
        field_name: Optional[str] = None,
        old_value: Any = None,
        new_value: Any = None,
        change_reason: Optional[str] = None,
    ) -> None:
        await self.track_activity(
            ActivityType.DATA_CHANGE.value,
            ActivityCategory.DATA_MANAGEMENT.value,
            f"{operation} operation on {table_name}",
            target_resource=table_name,
            target_id=record_id,
            old_values={field_name: old_value} if old_value is not None else None,
            new_values={field_name: new_value} if new_value is not None else None,
            additional_data={"change_reason": change_reason},
        )

    async def track_feature_usage(
        self, feature_name: str, feature_category: str, success: bool = True, execution_time: int = 0
    ) -> None:
        await self.track_activity(
            ActivityType.FEATURE_USAGE.value,
            feature_category,
            f"Used feature: {feature_name}",
            target_resource=feature_name,
            additional_data={"success": success, "execution_time": execution_time},
        )

    # Security events

    async def track_security_event(
        self,
        event_type: str,
        event_severity: str,
        description: str,
        additional_data: Optional[Any] = None,
    ) -> Optional[dict]:
        payload = {
            "event_type": event_type,
            "event_severity": event_severity,
            "event_description": description,
            "admin_id": self.admin_id,
            "additional_data": additional_data,
        }
        return await self.send_request("POST", SECURITY_EVENT_ENDPOINT, payload)

    async def track_error(
        self,
        error_type: str,
        message: str,
        stack: Optional[str] = None,
        context: Optional[dict] = None,
    ) -> Optional[dict]:
        return await self.track_security_event(
            SecurityEventType.ERROR.value,
            Severity.MEDIUM.value,
            f"{error_type}: {message}",
            {"error_stack": stack, "context": context},
        )

    async def track_suspicious_activity(
        self, activity_type: str, description: str, severity: str = Severity.HIGH.value
    ) -> Optional[dict]:
        return await self.track_security_event(
            SecurityEventType.SUSPICIOUS_ACTIVITY.value,
            severity,
            description,
            {"activity_type": activity_type},
        )

    async def report_tracking_failures(self) -> None:
        if not self.failed_sends and not self.dropped_sends:
            return
        failed, dropped = self.failed_sends, self.dropped_sends
        self.failed_sends = self.dropped_sends = 0
        await self.track_security_event(
            SecurityEventType.TRACKING_FAILURE.value,
            Severity.LOW.value,
            f"{failed} tracking requests failed, {dropped} dropped from the retry store",
            {"failed": failed, "dropped": dropped},
        )

    # Heartbeat

    def start_heartbeat(self) -> None:
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.create_task(self._heartbeat())

    async def stop_heartbeat(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _heartbeat(self) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            if self.session_token:
                await self.track_activity(
                    ActivityType.HEARTBEAT.value, ActivityCategory.SYSTEM.value, "Session heartbeat"
                )

    # Transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.session_token:
            headers[SESSION_HEADER] = self.session_token
        return headers

    async def _send(self, method: str, endpoint: str, data: Optional[dict] = None) -> dict:
        response = await self.client.request(method, endpoint, json=data, headers=self._headers())
        response.raise_for_status()
        return response.json()

    async def send_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict] = None,
        store_on_failure: bool = True,
    ) -> Optional[dict]:
        try:
            return await self._send(method, endpoint, data)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Admin tracking request {method} {endpoint} failed: {e}")
            self.failed_sends += 1
            if data is not None and store_on_failure:
                self.store_failed_request(method, endpoint, data)
            return None

    def store_failed_request(self, method: str, endpoint: str, data: dict) -> None:
        failed = list(self.store.get(FAILED_KEY) or [])
        failed.append({"method": method, "endpoint": endpoint, "data": data, "timestamp": self._clock()})
        overflow = len(failed) - self.failed_cap
        if overflow > 0:
            # Oldest entries go first.
            del failed[:overflow]
            self.dropped_sends += overflow
        self.store.set(FAILED_KEY, failed)

    async def retry_failed_requests(self) -> int:
        """Replay stored failures in order; the ones that fail again stay stored."""
        pending = list(self.store.get(FAILED_KEY) or [])
        if not pending:
            return 0
        # Failures stored while the replay is in flight land in the emptied store.
        self.store.set(FAILED_KEY, [])
        remaining = []
        for request in pending:
            try:
                await self._send(request["method"], request["endpoint"], request["data"])
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Retry of {request['method']} {request['endpoint']} failed: {e}")
                remaining.append(request)
        failed = remaining + list(self.store.get(FAILED_KEY) or [])
        overflow = len(failed) - self.failed_cap
        if overflow > 0:
            del failed[:overflow]
            self.dropped_sends += overflow
        self.store.set(FAILED_KEY, failed)
        return len(pending) - len(remaining)
