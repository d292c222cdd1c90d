"""
LubeLogger API client: vehicles, gas records, and gas record inserts.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from ..config import LubeLoggerConfig
from .models import GasRecord, PostResponse, Vehicle


class LubeLoggerError(RuntimeError):
    """Base class for LubeLogger API failures."""


class LubeLoggerHttpError(LubeLoggerError):
    def __init__(self, status: int, message: str, body: Optional[str] = None):
        super().__init__(f"LubeLogger HTTP {status}: {message}")
        self.status = status
        self.body = body


class LubeLoggerResponseError(LubeLoggerError):
    def __init__(self, message: str, body: str):
        super().__init__(f"{message} (body: {body})")
        self.body = body


class LubeLoggerClient:
    """
    Thin wrapper over the LubeLogger REST API.

    Every request authenticates with the x-api-key header. Nothing is retried:
    transport failures and timeouts surface as LubeLoggerHttpError(status=0).
    """

    def __init__(self, config: LubeLoggerConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.config.api_url}/{endpoint.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "x-api-key": self.config.authorization}

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        try:
            return self.session.request(
                method,
                self._url(endpoint),
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
                **kwargs,
            )
        except requests.RequestException as e:
            raise LubeLoggerHttpError(0, f"{method} {endpoint} failed: {e}") from e

    def _get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._request("GET", endpoint, params=params)
        if not resp.ok:
            raise LubeLoggerHttpError(resp.status_code, resp.reason or "request failed", resp.text)
        try:
            return json.loads(resp.text)
        except ValueError as e:
            raise LubeLoggerResponseError(f"GET {endpoint}: invalid JSON", resp.text) from e

    def get_vehicles(self) -> List[Vehicle]:
        data = self._get_json("vehicles")
        if not isinstance(data, list):
            raise LubeLoggerResponseError("GET vehicles: expected a list", json.dumps(data))
        try:
            return [Vehicle.model_validate(v) for v in data]
        except ValidationError as e:
            raise LubeLoggerResponseError(f"GET vehicles: {e}", json.dumps(data)) from e

    def get_gas_records(self, vehicle_id: int) -> List[GasRecord]:
        """Gas records for one vehicle, in the order the server returns them."""
        endpoint = "vehicle/gasrecords"
        data = self._get_json(endpoint, params={"vehicleId": vehicle_id})
        if data is None:
            return []
        if not isinstance(data, list):
            raise LubeLoggerResponseError(f"GET {endpoint}: expected a list", json.dumps(data))
        try:
            return [GasRecord.model_validate(r) for r in data]
        except ValidationError as e:
            raise LubeLoggerResponseError(f"GET {endpoint}: {e}", json.dumps(data)) from e

    def add_gas_record(self, vehicle_id: int, record: GasRecord) -> PostResponse:
        """
        Submit one gas record.

        Empty body: success for any 2xx status, otherwise an HTTP error.
        Non-empty body: must decode into PostResponse, whatever the status.
        """
        endpoint = "vehicle/gasrecords/add"
        resp = self._request(
            "POST",
            endpoint,
            params={"vehicleId": vehicle_id},
            data=record.form_values(),
        )
        body = resp.text or ""
        if not body.strip():
            if 200 <= resp.status_code < 300:
                return PostResponse(success=True, message="")
            raise LubeLoggerHttpError(
                resp.status_code, f"empty response from {endpoint}", body
            )
        try:
            return PostResponse.model_validate_json(body)
        except ValidationError as e:
            raise LubeLoggerResponseError(f"POST {endpoint}: undecodable response", body) from e
