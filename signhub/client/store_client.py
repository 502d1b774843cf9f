"""
Content store HTTP client.

Pulls the signage dataset from the data service (GET /api/data) and,
for the editor side, replaces it wholesale (POST /api/data).
"""

import requests

from signhub.errors import FetchFailure
from signhub.models import Dataset


class ContentStoreClient:
    """
    Client for the signage data service.

    Retry policy belongs to the caller: fetch_dataset() either returns a
    complete Dataset or raises FetchFailure.
    """

    DATA_ENDPOINT = "/api/data"

    def __init__(self, base_url: str, timeout: float = 10):
        """
        Initialize content store client.

        Args:
            base_url: Base URL of the data service (e.g., http://localhost:3001)
            timeout: HTTP request timeout in seconds (default: 10)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    @property
    def data_url(self) -> str:
        return self.base_url + self.DATA_ENDPOINT

    def fetch_dataset(self) -> Dataset:
        """
        Fetch the current dataset.

        Returns:
            Dataset snapshot

        Raises:
            FetchFailure: On connection error, timeout, non-2xx status,
                invalid JSON, or a body that is not a dataset object
        """
        url = self.data_url
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise FetchFailure(f"Timeout connecting to {url}") from e
        except requests.exceptions.ConnectionError as e:
            raise FetchFailure(f"Connection error: {url} unreachable") from e
        except requests.exceptions.RequestException as e:
            raise FetchFailure(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise FetchFailure(f"HTTP {response.status_code} from {url}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchFailure(f"Invalid JSON from {url}: {e}") from e

        try:
            return Dataset.from_dict(payload)
        except ValueError as e:
            raise FetchFailure(str(e)) from e

    def save_dataset(self, dataset: Dataset) -> bool:
        """
        Replace the stored dataset wholesale.

        Args:
            dataset: Complete dataset to store

        Returns:
            True if successful, False otherwise
        """
        url = self.data_url
        try:
            response = requests.post(url, json=dataset.to_dict(), timeout=self.timeout)

            if response.ok:
                return True
            else:
                print(f"[StoreClient] Save failed, HTTP {response.status_code}: {response.text}")
                return False

        except requests.exceptions.Timeout:
            print(f"[StoreClient] Timeout connecting to {url}")
            return False
        except requests.exceptions.ConnectionError:
            print(f"[StoreClient] Connection error: {url} unreachable")
            return False
        except requests.exceptions.RequestException as e:
            print(f"[StoreClient] Error saving dataset: {e}")
            return False

    def test_connection(self) -> bool:
        """
        Test connection to the data service.

        Returns:
            True if server is reachable, False otherwise
        """
        try:
            response = requests.get(self.data_url, timeout=self.timeout)
            return response.status_code in [200, 404]  # 404 still means the server is up
        except requests.exceptions.RequestException:
            return False
