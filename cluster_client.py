import gzip
import json
import requests
from typing import Any, Dict, Optional
from urllib.parse import urlparse
from loguru import logger
from settings import Settings, Compression, ClusterConfigurationError


class StepResult:
    """Outcome of a single cluster call: either Ok(payload) or Failed(status_code, detail)"""

    def __init__(self, ok: bool, status_code: int, payload: Any = None) -> None:
        self.ok = ok
        self.status_code = status_code
        self.payload = payload

    @classmethod
    def success(cls, payload: Any = None, status_code: int = 200) -> "StepResult":
        return cls(True, status_code, payload)

    @classmethod
    def failed(cls, status_code: int, detail: Any = None) -> "StepResult":
        return cls(False, status_code, detail)

    def __repr__(self) -> str:
        if self.ok:
            return f"Ok({self.payload!r})"
        return f"Failed({self.status_code}, {self.payload!r})"


class ClusterClient:
    """Thin wrapper around the OpenSearch REST API for alias and index housekeeping"""

    SUCCESS_CODES = (200, 201)

    def __init__(self, settings: Settings) -> None:
        self.base_url: str = settings.base_url
        self.timeout: int = settings.request_timeout
        self.compression: Compression = settings.compression
        self.requests = settings.get_requests_object()

    # === ALIAS OPERATIONS ===

    def cat_aliases(self, name: str) -> StepResult:
        """List alias bindings matching name"""
        return self._send("GET", f"/_cat/aliases/{name}", params={"format": "json"})

    def delete_alias(self, index_name: str, alias_name: str) -> StepResult:
        """Remove the binding between index_name and alias_name"""
        return self._send("DELETE", f"/{index_name}/_alias/{alias_name}")

    def put_alias(self, index_name: str, alias_name: str) -> StepResult:
        """Bind alias_name to index_name"""
        return self._send("PUT", f"/{index_name}/_alias/{alias_name}")

    # === INDEX OPERATIONS ===

    def cat_indices(self, pattern: str) -> StepResult:
        """List indices matching pattern"""
        result = self._send("GET", f"/_cat/indices/{pattern}", params={"format": "json", "h": "index"})
        if not result.ok and result.status_code == 404:
            # No indices match pattern - this is normal
            logger.debug(f"No indices found matching pattern {pattern}")
            return StepResult.success([])
        return result

    def delete_index(self, index_name: str) -> StepResult:
        """Delete index"""
        return self._send("DELETE", f"/{index_name}")

    def reindex(self, source: str, dest: str) -> StepResult:
        """Submit a reindex task without waiting for it to finish"""
        body = {
            "source": {"index": source},
            "dest": {"index": dest}
        }
        return self._send("POST", "/_reindex", params={"wait_for_completion": "false"}, body=body)

    # === TRANSPORT ===

    def _send(self, method: str, path: str, params: Optional[Dict[str, str]] = None, body: Optional[Dict[str, Any]] = None) -> StepResult:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        data = None
        if body is not None:
            logger.debug(f"{method} {url} body: {body}")
            data = json.dumps(body).encode("utf-8")
            if self.compression == Compression.GZIP:
                data = gzip.compress(data)
                headers["content-encoding"] = "gzip"
        else:
            logger.debug(f"{method} {url}")

        response = self.requests.request(method, url, params=params, data=data, headers=headers, timeout=self.timeout)
        payload = self._decode(response)

        if response.status_code in self.SUCCESS_CODES:
            return StepResult.success(payload, response.status_code)

        logger.error(f"{method} {path} failed (HTTP {response.status_code}) - Response: {response.text}")
        return StepResult.failed(response.status_code, payload)

    def _decode(self, response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


def connect(settings: Settings) -> ClusterClient:
    """Build a client for the configured node; performs no network I/O"""
    parsed = urlparse(settings.url or "")
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ClusterConfigurationError(f"Invalid node URI: {settings.url!r}")
    try:
        # Port parsing is lazy in urlparse; force it so a bad port fails here
        parsed.port
    except ValueError as e:
        raise ClusterConfigurationError(f"Invalid node URI: {settings.url!r} ({e})") from e

    logger.info(f"Connecting to {settings.base_url} (timeout={settings.request_timeout}s, retries={settings.max_retries}, "
                f"verify_certs={settings.verify_certs}, compression={settings.compression.value}, "
                f"sniff_on_start={settings.sniff_on_start}, resurrect={settings.resurrect_strategy})")
    return ClusterClient(settings)
