"""Pet registry API client.

A thin wrapper around the registry's REST API built on the ``requests``
library, for scripts and bots that talk to a running registry.

Every method returns a tuple ``(data, error)``: on success ``error`` is
``None``; on failure ``data`` is ``None`` (or an empty list) and ``error``
is a dictionary with ``status_code``, ``code`` and ``message`` keys taken
from the API's error body.  Methods never raise for HTTP or network
failures.

Mutating calls need a bearer token (see ``create_token.py``) passed as
``api_key``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class PetRegistryClient:
    """Client for the ``/api/v1`` routes of the pet registry."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the registry, e.g. ``http://localhost:8000``.
            api_key: Optional bearer token sent in the ``Authorization``
                header of every request.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request against ``/api/v1`` + ``path``."""
        url = f"{self.base_url}/api/v1{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            return None, self._http_error(exc)
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "code": None, "message": str(exc)}

    @staticmethod
    def _http_error(exc: requests.HTTPError) -> Error:
        response = exc.response
        status = response.status_code if response is not None else None
        code = None
        message = ""
        if response is not None:
            try:
                body = response.json()
            except ValueError:
                message = response.text
            else:
                error = body.get("error") if isinstance(body, dict) else None
                if isinstance(error, dict):
                    code = error.get("code")
                    message = error.get("message") or ""
                elif isinstance(body, dict):
                    message = str(body.get("detail") or body)
        if not message:
            message = str(exc)
        logger.error("API request failed (%s): %s", status, message)
        return {"status_code": status, "code": code, "message": message}

    # ------------------------------------------------------------------
    # Pet operations
    # ------------------------------------------------------------------
    def list_pets(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", "/pets/")
        if error:
            return [], error
        return data if isinstance(data, list) else [], None

    def get_pet(self, pet_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Fetch one pet; a missing pet is reported as a 404 error."""
        return self._request("GET", f"/pets/{pet_id}")

    def register_pet(
        self, name: str, breed: str, color: str, photo_reference: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        payload = {"name": name, "breed": breed, "color": color, "photo_reference": photo_reference}
        return self._request("POST", "/pets/", json_body=payload)

    def update_pet(
        self, pet_id: int, name: str, breed: str, color: str, photo_reference: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        payload = {"name": name, "breed": breed, "color": color, "photo_reference": photo_reference}
        return self._request("PUT", f"/pets/{pet_id}", json_body=payload)

    def report_lost(self, pet_id: int, lost_location: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("POST", f"/pets/{pet_id}/lost", json_body={"lost_location": lost_location})

    def report_found(
        self, pet_id: int, finder_name: str, found_location: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        payload = {"finder_name": finder_name, "found_location": found_location}
        return self._request("POST", f"/pets/{pet_id}/found", json_body=payload)

    def delete_pet(self, pet_id: int) -> Tuple[bool, Optional[Error]]:
        """Delete a pet.

        Returns:
            A tuple ``(success, error)``.
        """
        data, error = self._request("DELETE", f"/pets/{pet_id}")
        if error:
            return False, error
        return data is not None, None

    def get_found_report(self, pet_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/pets/{pet_id}/found-report")

    def get_info(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", "/info/")
