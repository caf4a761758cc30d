"""HTTP GET with bounded retries and linear backoff."""
import logging
import time
from typing import Optional

import requests

from weather_provider import FetchError, NotFound

BACKOFF_STEP_SECONDS = 0.2
USER_AGENT = "weather-term/1.0"


def fetch_json(
    url: str,
    params: Optional[dict] = None,
    timeout: float = 10,
    max_retries: int = 3,
) -> dict:
    """
    GET a URL and decode its JSON body.

    Each failed attempt sleeps ``attempt * 200ms`` before retrying; after
    ``max_retries`` attempts the last error is surfaced.

    Returns:
        dict: Decoded JSON payload

    Raises:
        NotFound: On HTTP 404 (not retried)
        FetchError: On timeout, connectivity or decode failure after retries
    """
    attempts = max(1, max_retries)
    last_error = "unknown error"

    for attempt in range(1, attempts + 1):
        try:
            logging.debug(f"GET {url} params={params} (attempt {attempt}/{attempts})")
            response = requests.get(
                url,
                params=params,
                timeout=timeout,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            )
            logging.debug(f"Response status: {response.status_code}")

            if response.status_code == 404:
                raise NotFound(f"HTTP 404 from {url}")
            if not response.ok:
                raise FetchError(f"HTTP {response.status_code}: {response.text[:200]}")

            try:
                data = response.json()
            except ValueError as e:
                raise FetchError(f"Invalid JSON response: {e}") from e
            if not isinstance(data, dict):
                raise FetchError(f"Unexpected JSON type: {type(data).__name__}")
            return data

        except NotFound:
            raise
        except FetchError as e:
            last_error = e.reason
        except requests.exceptions.RequestException as e:
            last_error = f"Network error: {e}"

        logging.warning(f"Fetch attempt {attempt} failed: {last_error}")
        if attempt < attempts:
            delay = attempt * BACKOFF_STEP_SECONDS
            logging.debug(f"Retrying in {delay:.1f}s...")
            time.sleep(delay)

    logging.error(f"Giving up on {url} after {attempts} attempts")
    raise FetchError(last_error)
