"""
HTTP client for the analytics service.
"""

import json
import logging
import warnings
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from . import config
from .credentials import Credentials
from .events import Event, PlayerSession
from .exceptions import (
    MalformedResponseError, RateLimitError, ResponseError, SecretKeyNotFoundError,
    ServerNotFoundError, ServerNotSetupError, TransportError
)
from .models import PluginInformation, ServerInformation
from .platform import Platform, PlatformType

logger = logging.getLogger(__name__)


def _to_payload(obj: Any) -> Any:
    """Turn a model, event or plain value into something ``json`` can encode."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return obj


class AnalyticsClient:
    """Client for reporting server analytics.

    Every public call returns a :class:`concurrent.futures.Future`. Requests
    run on the client's thread pool; calls made one after another may finish
    in any order.
    """

    def __init__(self, platform: Platform, secret_key: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: int = 30,
                 max_workers: int = 4, insecure_test_hosts: Optional[bool] = None):
        """
        Initialize the client.

        Args:
            platform: Host platform supplying config, telemetry and logging
            secret_key: Secret key of this server, None until set up
            base_url: API base URL, defaults to the environment override or the public API
            timeout: Request timeout in seconds
            max_workers: Size of the request thread pool
            insecure_test_hosts: Skip TLS checks for ``.test`` hosts, defaults to the environment flag
        """
        self.platform = platform
        self.credentials = Credentials(secret_key)
        self.timeout = timeout

        override = config.get_base_url_override()
        if base_url is None and override:
            platform.warning(f"Setting API URL to {override}")
        self.base_url = config.resolve_base_url(base_url)

        # Setup session with headers
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': config.USER_AGENT,
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })
        self.session.verify = config.should_verify_tls(self.base_url, insecure_test_hosts)

        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="plugin-analytics")

    @property
    def secret_key(self) -> Optional[str]:
        return self.credentials.secret_key

    def set_secret_key(self, secret_key: Optional[str]) -> None:
        """Replace the secret key. In-flight requests keep the old one."""
        self.credentials.secret_key = secret_key

    def close(self) -> None:
        """Wait for pending requests, then release the pool and session."""
        self._executor.shutdown(wait=True)
        self.session.close()

    def __enter__(self) -> "AnalyticsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_plugin_version(self, platform_type: PlatformType) -> "Future[PluginInformation]":
        """Fetch the latest plugin build and its download for ``platform_type``."""
        secret_key = self.credentials.snapshot()

        def task() -> PluginInformation:
            response = self._send('GET', '/plugin', secret_key,
                                  "Failed to retrieve plugin information")
            return PluginInformation.from_response(self._read_json(response), platform_type)

        return self._submit(task)

    def get_server_information(self) -> "Future[ServerInformation]":
        """Fetch what the service knows about this server."""
        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(ServerNotSetupError())

        def task() -> ServerInformation:
            response = self._send('GET', '/server', secret_key,
                                  "Failed to retrieve server information")
            data = self._get_field(self._read_json(response), 'data')
            try:
                return ServerInformation.model_validate(data)
            except ValidationError as e:
                raise MalformedResponseError(f"Malformed server information response: {e}") from e

        return self._submit(task)

    def track_player_session(self, session: PlayerSession) -> "Future[bool]":
        """
        Report a finished player session.

        Resolves to False without contacting the service when analytics is
        not set up or the player is excluded.
        """
        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(SecretKeyNotFoundError())

        if not self.platform.is_analytics_setup():
            self.platform.debug(f"Skipped tracking player session for {session.name} as Analytics isn't setup.")
            return self._completed(False)

        if self.platform.is_player_excluded(session.unique_id):
            self.platform.debug(f"Skipped tracking player session for {session.name} as they are excluded.")
            return self._completed(False)

        session.logout()
        payload = session.to_dict()

        self.platform.debug(f"Sending payload: {json.dumps(payload)}")
        self.platform.debug(f"Tracking player session for {session.name}..")
        self.platform.debug(f" - UUID: {session.unique_id}")
        self.platform.debug(f" - Type: {session.type.value}")
        self.platform.debug(f" - Played for: {session.duration_in_seconds}s")
        self.platform.debug(f" - IP: {session.ip_address}")
        self.platform.debug(f" - Joined at: {payload['joined_at']}")
        self.platform.debug(f" - First joined at: {payload['first_joined_at']}")

        return self._submit(self._success_task('GET', '/server/sessions', secret_key,
                                               "Failed to track player session", payload))

    def complete_server_setup(self) -> "Future[bool]":
        """Tell the service this server finished its setup."""
        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(ServerNotSetupError())

        return self._submit(self._success_task('GET', '/server/setup', secret_key,
                                               "Failed to complete server setup"))

    def track_heartbeat(self, player_count: int) -> "Future[bool]":
        """Report how many players are online right now."""
        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(ServerNotSetupError())

        payload = {'players': int(player_count)}
        return self._submit(self._success_task('POST', '/server/heartbeat', secret_key,
                                               "Failed to track heartbeat", payload))

    def send_telemetry(self) -> "Future[bool]":
        """Send the platform's current telemetry."""
        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(ServerNotSetupError())

        def build_payload() -> Any:
            return _to_payload(self.platform.get_telemetry())

        return self._submit(self._success_task('POST', '/server/telemetry', secret_key,
                                               "Failed to send telemetry", build_payload=build_payload))

    def get_country_from_ip(self, ip: str) -> "Future[Optional[str]]":
        """
        Look up the country code of an IP address.

        Deprecated: the service resolves countries itself and this endpoint
        may be removed.

        Returns:
            Future resolving to the country code, or None when the service
            could not resolve it
        """
        warnings.warn("get_country_from_ip is deprecated and may be removed",
                      DeprecationWarning, stacklevel=2)

        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(ServerNotSetupError())

        def task() -> Optional[str]:
            response = self._send('GET', f"/ip/{quote(ip, safe=':.')}", secret_key,
                                  "Failed to retrieve country from IP")
            body = self._read_json(response)
            if not self._get_field(body, 'success'):
                return None
            country_code = self._get_field(body, 'country_code')
            return str(country_code) if country_code is not None else None

        return self._submit(task)

    def send_events(self, events: List[Event]) -> "Future[bool]":
        """Send a batch of events. An empty batch is still sent."""
        secret_key = self.credentials.snapshot()
        if secret_key is None:
            return self._failed(SecretKeyNotFoundError())

        payload = [_to_payload(event) for event in events]
        self.platform.debug(f"Sending events: {json.dumps(payload)}")

        def task() -> bool:
            self._send('POST', '/events', secret_key, "Failed to send events",
                       payload, expected_status=(204, 200))
            return True

        return self._submit(task)

    def _submit(self, task: Callable[[], Any]) -> Future:
        return self._executor.submit(task)

    @staticmethod
    def _completed(value: Any) -> Future:
        future = Future()
        future.set_result(value)
        return future

    @staticmethod
    def _failed(error: Exception) -> Future:
        future = Future()
        future.set_exception(error)
        return future

    def _success_task(self, method: str, endpoint: str, secret_key: str,
                      failure_message: str, payload: Any = None,
                      build_payload: Optional[Callable[[], Any]] = None) -> Callable[[], bool]:
        """Build a task that sends one request and returns the body's ``success`` flag.

        ``build_payload`` runs on the worker, so its errors fail the future.
        """
        def task() -> bool:
            body = build_payload() if build_payload is not None else payload
            response = self._send(method, endpoint, secret_key, failure_message, body)
            return bool(self._get_field(self._read_json(response), 'success'))
        return task

    def _send(self, method: str, endpoint: str, secret_key: Optional[str],
              failure_message: str, payload: Any = None,
              expected_status: Union[int, Tuple[int, ...]] = 200) -> requests.Response:
        """Send one request and raise for any status outside ``expected_status``."""
        url = f"{self.base_url}{endpoint}"
        headers = {config.SECRET_KEY_HEADER: secret_key} if secret_key else {}
        kwargs: Dict[str, Any] = {'headers': headers, 'timeout': self.timeout}
        if payload is not None:
            kwargs['json'] = payload

        logger.debug(f"{method} {url}")
        try:
            if method == 'POST':
                response = self.session.post(url, **kwargs)
            else:
                response = self.session.get(url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise TransportError(failure_message) from e

        if response is None:
            raise TransportError(failure_message)

        self._handle_response_errors(response, expected_status)
        return response

    def _handle_response_errors(self, response: requests.Response,
                                expected_status: Union[int, Tuple[int, ...]]) -> None:
        if isinstance(expected_status, int):
            expected_status = (expected_status,)

        status_code = response.status_code
        if status_code in expected_status:
            return
        if status_code == 404:
            raise ServerNotFoundError()
        if status_code == 429:
            raise RateLimitError()

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and 'message' in body:
            message = str(body['message'])
            raise ResponseError(f"Unexpected status code {status_code} ({message})",
                                status_code=status_code, service_message=message)

        if self.platform.get_platform_config().verbose:
            self.platform.warning(f"Received response: {response.text}")

        raise ResponseError(f"Unexpected status code ({status_code})", status_code=status_code)

    @staticmethod
    def _read_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError("Response body is not valid JSON",
                                         status_code=response.status_code) from e

    @staticmethod
    def _get_field(body: Any, key: str) -> Any:
        if not isinstance(body, dict) or key not in body:
            raise MalformedResponseError(f"Response is missing '{key}'")
        return body[key]
