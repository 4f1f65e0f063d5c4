import requests
from enum import Enum
from typing import Optional, Tuple
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class Compression(Enum):
    NONE = "none"
    GZIP = "gzip"


class ClusterConfigurationError(ValueError):
    """Raised when the cluster settings cannot produce a usable client"""


class Settings:

    def __init__(self, url: str, request_timeout: int = 60, max_retries: int = 10, verify_certs: bool = False, compression: Compression = Compression.GZIP, sniff_on_start: bool = False, resurrect_strategy: str = "none", cert_file_path: Optional[str] = None, key_file_path: Optional[str] = None) -> None:
        self.url: str = url
        self.request_timeout: int = request_timeout
        self.max_retries: int = max_retries
        self.verify_certs: bool = verify_certs
        self.compression: Compression = compression
        self.sniff_on_start: bool = sniff_on_start
        self.resurrect_strategy: str = resurrect_strategy
        self.cert_file_path: Optional[str] = cert_file_path
        self.key_file_path: Optional[str] = key_file_path

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def get_retry_policy(self) -> Retry:
        # Retry connection errors and gateway statuses on every verb; once
        # exhausted, hand the last response back instead of raising.
        return Retry(
            total=self.max_retries,
            status_forcelist=(502, 503, 504),
            allowed_methods=None,
            raise_on_status=False,
        )

    def get_requests_object(self) -> requests.Session:
        s: requests.Session = requests.Session()
        if self.cert_file_path and self.key_file_path:
            cert: Tuple[str, str] = (self.cert_file_path, self.key_file_path)
            s.cert = cert
        s.verify = self.verify_certs
        s.headers = {"content-type": "application/json", 'charset':'UTF-8'}
        if self.compression == Compression.GZIP:
            s.headers["accept-encoding"] = "gzip"
        adapter = HTTPAdapter(max_retries=self.get_retry_policy())
        s.mount("http://", adapter)
        s.mount("https://", adapter)
        return s
