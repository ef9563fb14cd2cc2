from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

import requests

from settings import Settings
from solar_monthly.models import CumulativeSeries

logger = logging.getLogger(__name__)

SUCCESS_CODE = "1"
LOGIN_SYS_CODE = "207"
DATA_SYS_CODE = "901"
LOGIN_PATH = "/openapi/login"
HISTORICAL_PATH = "/openapi/getDevicePointsDayMonthYearDataList"


class SolarApiError(Exception):
    """Base class for failures talking to the monitoring API."""

    status_code = 502

    def user_message(self) -> str:
        return str(self)


class TransportError(SolarApiError):
    def __init__(self, operation: str, cause: requests.RequestException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause

    def user_message(self) -> str:
        if isinstance(self.cause, requests.Timeout):
            return f"{self.operation} timed out. Please try again."
        return f"{self.operation} failed: could not reach the monitoring service."


class ResultCodeError(SolarApiError):
    def __init__(self, operation: str, result_code: str, result_msg: str) -> None:
        super().__init__(f"{operation} rejected (result_code={result_code}): {result_msg}")
        self.operation = operation
        self.result_code = result_code
        self.result_msg = result_msg

    def user_message(self) -> str:
        return self.result_msg or f"{self.operation} failed"


class MissingTokenError(SolarApiError):
    status_code = 401

    def __init__(self) -> None:
        super().__init__("Please login first")


class ResponseFormatError(SolarApiError):
    pass


@dataclass(frozen=True)
class LoginSession:
    token: str
    user_name: str
    email: str


@dataclass(frozen=True)
class HistoricalQuery:
    ps_key: str
    data_point: str
    start_time: str
    end_time: str
    data_type: str = "2"
    query_type: str = "2"
    order: str = "0"


class SolarApiClient:
    """Thin client for the login and historical-data OpenAPI endpoints."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def login(self, account: str | None = None, password: str | None = None) -> LoginSession:
        payload = {
            "appkey": self.settings.app_key,
            "user_account": account or self.settings.user_account,
            "user_password": password or self.settings.user_password,
        }
        logger.info("Login request for %s", payload["user_account"])
        data = self._post("Login", LOGIN_PATH, payload, self._headers(LOGIN_SYS_CODE))
        result = _unwrap("Login", data)
        if not isinstance(result, Mapping) or not result.get("token"):
            raise ResponseFormatError("Login response did not contain a token")
        logger.info("Login successful")
        return LoginSession(
            token=str(result["token"]),
            user_name=str(result.get("user_name") or ""),
            email=str(result.get("email") or ""),
        )

    def historical_data(
        self,
        token: str | None,
        ps_key_list: List[str],
        data_point: str,
        start_time: str,
        end_time: str,
        *,
        data_type: str = "2",
        query_type: str = "2",
        order: str = "0",
    ) -> Dict[str, Any]:
        """Return the raw historical-data payload after checking its result code."""

        if not token:
            raise MissingTokenError()
        payload = {
            "appkey": self.settings.app_key,
            "data_point": data_point,
            "data_type": data_type,
            "end_time": end_time,
            "lang": self.settings.lang,
            "order": order,
            "ps_key_list": list(ps_key_list),
            "query_type": query_type,
            "start_time": start_time,
            "sys_code": int(LOGIN_SYS_CODE),
            "token": token,
        }
        logger.info(
            "Fetching historical data ps_key_list=%s data_point=%s %s-%s",
            ps_key_list,
            data_point,
            start_time,
            end_time,
        )
        headers = self._headers(DATA_SYS_CODE)
        headers["token"] = token
        data = self._post("Historical data request", HISTORICAL_PATH, payload, headers)
        _unwrap("Historical data request", data)
        return data

    def fetch_cumulative_series(self, token: str | None, query: HistoricalQuery) -> CumulativeSeries:
        data = self.historical_data(
            token,
            [query.ps_key],
            query.data_point,
            query.start_time,
            query.end_time,
            data_type=query.data_type,
            query_type=query.query_type,
            order=query.order,
        )
        series = parse_historical_response(data, query.ps_key, query.data_point)
        logger.info("Received %d readings for %s", len(series), series.ps_key)
        return series

    def _headers(self, sys_code: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-access-key": self.settings.secret_key,
            "sys_code": sys_code,
        }

    def _post(self, operation: str, path: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:
        url = f"{self.settings.base_url}{path}"
        try:
            response = self.session.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.settings.timeout_sec,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("%s failed: %s", operation, exc)
            raise TransportError(operation, exc) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseFormatError(f"{operation} returned invalid JSON") from exc


def parse_historical_response(
    data: Mapping[str, Any],
    ps_key: str | None = None,
    data_point: str | None = None,
) -> CumulativeSeries:
    """Extract one device/data-point series from a historical-data payload.

    The requested keys are preferred; otherwise the first device and first
    data point in the payload are used.
    """

    result = data.get("result_data")
    if not isinstance(result, Mapping):
        raise ResponseFormatError("Historical data response has no result_data")
    if not result:
        return CumulativeSeries(ps_key=ps_key or "", data_point=data_point or "", readings=())

    device_key = ps_key if ps_key in result else next(iter(result))
    points = result[device_key]
    if not isinstance(points, Mapping) or not points:
        return CumulativeSeries(ps_key=device_key, data_point=data_point or "", readings=())

    point_key = data_point if data_point in points else next(iter(points))
    rows = points[point_key] or []
    if not isinstance(rows, list):
        raise ResponseFormatError(f"Unexpected data for {device_key}/{point_key}")

    try:
        return CumulativeSeries.from_rows(device_key, point_key, rows)
    except (KeyError, TypeError, ValueError) as exc:
        raise ResponseFormatError(f"Malformed reading in historical data: {exc}") from exc


def _unwrap(operation: str, data: Any) -> Any:
    if not isinstance(data, Mapping):
        raise ResponseFormatError(f"{operation} returned an unexpected payload")
    code = str(data.get("result_code", ""))
    if code != SUCCESS_CODE:
        message = str(data.get("result_msg") or "")
        logger.warning("%s rejected: result_code=%s result_msg=%s", operation, code, message)
        raise ResultCodeError(operation, code, message)
    return data.get("result_data")
