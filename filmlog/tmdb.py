#!/usr/bin/env python3
"""
TMDb API client for poster lookup
"""

import logging

import requests

from filmlog.constants import (
    DEFAULT_IMAGE_SIZE, TMDB_IMAGE_BASE_URL, TMDB_SEARCH_URL, TMDB_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class TMDbClient:
    """Interface to The Movie Database search API (best effort, no caching)"""

    def __init__(self, api_key: str, image_size: str = DEFAULT_IMAGE_SIZE):
        self.api_key = api_key
        self.image_size = image_size
        self.search_url = TMDB_SEARCH_URL
        self.image_base_url = f"{TMDB_IMAGE_BASE_URL}/{image_size}"
        self.requests_made = 0
        self.posters_found = 0

    def get_poster_url(self, title: str) -> str:
        """
        Search TMDb by title and return the first result's poster URL

        Returns '' when there is no API key, the request fails, the response
        is not JSON, or the first result has no poster. Never raises.
        """
        if not self.api_key:
            return ''

        self.requests_made += 1
        try:
            response = requests.get(
                self.search_url,
                params={'api_key': self.api_key, 'query': title},
                headers={'Accept': 'application/json'},
                timeout=TMDB_TIMEOUT_SECONDS
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout:
            logger.warning(f"TMDb API timeout for '{title}'")
            return ''
        except requests.exceptions.RequestException as e:
            logger.warning(f"Error fetching poster for '{title}': {e}")
            return ''
        except ValueError as e:
            # Body was not JSON
            logger.warning(f"TMDb returned an unreadable response for '{title}': {e}")
            return ''

        results = data.get('results') if isinstance(data, dict) else None
        if not isinstance(results, list) or not results:
            logger.debug(f"No TMDb results for '{title}'")
            return ''

        # Only the first result is trusted
        poster_path = results[0].get('poster_path') if isinstance(results[0], dict) else None
        if not poster_path or not isinstance(poster_path, str):
            logger.debug(f"TMDb: first result for '{title}' has no poster")
            return ''

        self.posters_found += 1
        return self.image_base_url + poster_path

    def get_stats(self) -> dict:
        """Get lookup statistics"""
        hit_rate = (self.posters_found / self.requests_made * 100) if self.requests_made else 0
        return {
            'requests': self.requests_made,
            'posters_found': self.posters_found,
            'hit_rate': hit_rate,
        }
