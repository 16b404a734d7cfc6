import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from errors import RetrievalError
from settings import ProfilesConfig, ServicesConfig

logger = logging.getLogger(__name__)


class ProfileStore:
    """
    Static ZIP -> school closure profile table.

    Read from a local JSON file or an http(s) URL the first time it is needed
    and kept for the life of the store. Lookups are exact; a ZIP that is not
    in the table simply has no profile.
    """

    def __init__(self, profiles: Optional[ProfilesConfig] = None, services: Optional[ServicesConfig] = None):
        self.source = (profiles or ProfilesConfig()).source
        self.services = services or ServicesConfig()
        self._table: Optional[Dict[str, Any]] = None

    @property
    def table(self) -> Dict[str, Any]:
        if self._table is None:
            self._table = self._load()
            logger.info("Loaded %d school profiles from %s", len(self._table), self.source)
        return self._table

    def lookup(self, zipcode: str) -> Optional[Dict[str, Any]]:
        record = self.table.get(zipcode)
        if record is None:
            logger.debug("No school profile for ZIP %s", zipcode)
        return record

    def _load(self) -> Dict[str, Any]:
        if self.source.startswith(('http://', 'https://')):
            data = self._load_url()
        else:
            data = self._load_file()

        if not isinstance(data, dict):
            raise RetrievalError(f"School profile table {self.source} is not a JSON object")
        return data

    def _load_file(self) -> Any:
        path = Path(self.source)
        try:
            with open(path, encoding='utf-8') as f:
                return json.load(f)
        except OSError as e:
            raise RetrievalError(f"Could not read school profiles from {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise RetrievalError(f"School profiles in {path} are not valid JSON: {e}") from e

    def _load_url(self) -> Any:
        try:
            response = requests.get(self.source, timeout=self.services.timeout_seconds)
        except requests.RequestException as e:
            raise RetrievalError(f"Could not fetch school profiles: {e}") from e

        if response.status_code != 200:
            raise RetrievalError(f"School profile fetch returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise RetrievalError("School profiles are not valid JSON") from e
