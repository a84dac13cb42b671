"""JSON state file that carries the feature ledger between CLI runs."""
import json
import os
import shutil
from typing import Iterable, List

from .models import Feature
from .utils import safe_write_file, setup_logging


logger = setup_logging(__name__)

DEFAULT_STATE_FILE = os.path.join('.migration', 'features.json')


class FeatureStore:
    """Loads and saves features as a JSON list."""

    def __init__(self, path: str = DEFAULT_STATE_FILE):
        self.path = path

    @property
    def backup_path(self) -> str:
        return f"{self.path}.bak"

    def load(self) -> List[Feature]:
        """Load stored features.

        A missing file is an empty ledger. Entries that cannot be read are
        skipped with a warning, and a file that does not parse as a list is
        logged and treated as empty. In both cases the file is first copied
        to backup_path so the next save does not destroy the only copy.

        Returns:
            Readable features in stored order
        """
        if not os.path.exists(self.path):
            logger.debug(f"No state file at {self.path}, starting with an empty ledger")
            return []

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load features from {self.path}: {e}")
            self._backup()
            return []

        if not isinstance(data, list):
            logger.error(f"Failed to load features from {self.path}: expected a JSON list, got {type(data).__name__}")
            self._backup()
            return []

        features = []
        for index, item in enumerate(data):
            try:
                if not isinstance(item, dict):
                    raise TypeError(f"expected an object, got {type(item).__name__}")
                features.append(Feature.from_dict(item))
            except TypeError as e:
                logger.warning(f"Skipping unreadable feature #{index} in {self.path}: {e}")

        if len(features) < len(data):
            self._backup()

        logger.debug(f"Loaded {len(features)} features from {self.path}")
        return features

    def save(self, features: Iterable[Feature]) -> bool:
        """Write features to the state file atomically.

        Returns:
            True on success, False on failure
        """
        features = list(features)
        content = json.dumps([f.to_dict() for f in features], indent=2)
        if safe_write_file(self.path, content, logger):
            logger.debug(f"Saved {len(features)} features to {self.path}")
            return True
        return False

    def _backup(self) -> None:
        try:
            shutil.copyfile(self.path, self.backup_path)
            logger.warning(f"Copied unreadable state file to {self.backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up {self.path}: {e}")
