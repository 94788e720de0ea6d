"""
HTTP client the Streamlit dashboard uses to talk to the RiskViz API.

Failures never raise into the page: calls return ``{"error": ...}`` dicts,
or empty lists/frames for reads, and log the problem.
"""

import os
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from riskviz_dashboard.logger import get_logger

logger = get_logger(__name__)

DEFAULT_API_URL = "http://localhost:4000"


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, api_prefix: str = "/api", timeout: float = 10):
        self.base_url = (base_url or os.getenv("RISKVIZ_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.timeout = timeout

    def _url(self, path: str, prefixed: bool = True) -> str:
        return f"{self.base_url}{self.api_prefix if prefixed else ''}{path}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            r = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("api_unreachable", method=method, url=url, error=str(e))
            return {"error": str(e)}
        try:
            body = r.json()
        except ValueError:
            body = {"error": r.text or f"status_{r.status_code}"}
        if r.status_code >= 400:
            error = body.get("error") if isinstance(body, dict) else None
            logger.warning("api_error", method=method, url=url, status=r.status_code, error=error)
            return {"error": error or f"status_{r.status_code}", "status": r.status_code}
        return {"data": body, "status": r.status_code}

    def check_health(self) -> Dict[str, Any]:
        """{'ok': True, 'message': ...} when the backend answers, else {'ok': False, 'error': ...}."""
        result = self._request("GET", self._url("/health", prefixed=False))
        if "error" in result:
            return {"ok": False, "error": result["error"]}
        return {"ok": result["data"].get("status") == "ok", "message": result["data"].get("message", "")}

    def submit_response(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = self._request("POST", self._url("/responses"), json=payload)
        return result.get("data", result)

    def upload_csv(self, filename: str, content: bytes) -> Dict[str, Any]:
        files = {"file": (filename, content, "text/csv")}
        result = self._request("POST", self._url("/upload", prefixed=False), files=files)
        return result.get("data", result)

    def fetch_risk_data(self) -> pd.DataFrame:
        result = self._request("GET", self._url("/risk-data"))
        if "error" in result:
            return pd.DataFrame()
        return pd.DataFrame(result["data"])

    def clear_risk_data(self) -> Dict[str, Any]:
        result = self._request("DELETE", self._url("/risk-data"))
        return result.get("data", result)

    def fetch_points(self) -> List[Dict[str, Any]]:
        result = self._request("GET", self._url("/points"))
        return result.get("data", [])

    def fetch_insights(self) -> List[Dict[str, str]]:
        result = self._request("GET", self._url("/insights"))
        return result.get("data", [])
