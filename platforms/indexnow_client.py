import logging, threading
import requests
from typing import Optional

logger = logging.getLogger(__name__)

class IndexNowError(RuntimeError):
    pass

class IndexNowClient:
    API = "https://api.indexnow.org/IndexNow"

    def __init__(self, host: str, key: str, key_location: Optional[str] = None,
                 endpoint: Optional[str] = None, timeout: float = 30):
        self.host = host
        self.key = key
        self.key_location = key_location or f"https://{host}/{key}.txt"
        self.endpoint = endpoint or self.API
        self.timeout = timeout

    def payload(self, url: str) -> dict:
        return {
            "host": self.host,
            "key": self.key,
            "keyLocation": self.key_location,
            "urlList": [url],
        }

    def submit(self, url: str) -> str:
        r = requests.post(
            self.endpoint,
            json=self.payload(url),
            headers={"Content-Type": "application/json; charset=utf-8"},
            timeout=self.timeout,
        )
        if not 200 <= r.status_code < 300:
            raise IndexNowError(f"IndexNow submission failed ({r.status_code}): {r.text}")
        logger.info("submitted %s to IndexNow (%s)", url, r.status_code)
        return r.text

class IndexNowNotifier:
    """Fire-and-forget submission on a daemon timer; failures only reach the log."""

    def __init__(self, client: IndexNowClient, delay: float = 2.0):
        self.client = client
        self.delay = delay
        self.pending: list[threading.Timer] = []

    def _run(self, url: str):
        try:
            self.client.submit(url)
        except (requests.RequestException, IndexNowError) as e:
            logger.warning("IndexNow notification for %s failed: %s", url, e)

    def notify(self, url: str) -> threading.Timer:
        t = threading.Timer(self.delay, self._run, args=(url,))
        t.daemon = True
        t.start()
        self.pending = [p for p in self.pending if p.is_alive()] + [t]
        return t

    def drain(self, timeout: Optional[float] = None):
        """Wait for scheduled submissions, e.g. before a short-lived process exits."""
        for t in self.pending:
            t.join(timeout)
        self.pending = [p for p in self.pending if p.is_alive()]
