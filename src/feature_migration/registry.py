"""Feature registry for Base44 to REST API migration.

Tracks features that still depend on the Base44 SDK, records their migration
status, and renders replacement code from the template library.

The registry is an in-memory ledger with no locking. Callers that share one
instance across threads or processes must synchronise access themselves.
"""
import secrets
import string
import time
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .models import Feature, FeatureStatus, MigrationStats
from .templates import MigrationTemplate, apply_template, extract_endpoints, load_templates
from .utils import setup_logging


logger = setup_logging(__name__)

FeatureListener = Callable[[Feature], None]

_ID_ALPHABET = string.ascii_lowercase + string.digits
_PENDING_STATUSES = (FeatureStatus.DETECTED, FeatureStatus.PLANNED)


def generate_feature_id() -> str:
    """Time-based id with a random suffix, e.g. ``feature_1718000000000_k3j9x0a2b``."""
    suffix = ''.join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"feature_{int(time.time() * 1000)}_{suffix}"


class FeatureRegistry:
    """Holds features and migration templates for the life of the process."""

    def __init__(
        self,
        templates: Optional[Iterable[MigrationTemplate]] = None,
        features: Optional[Iterable[Feature]] = None,
    ):
        """Initialize the registry.

        Args:
            templates: Template library in registration order (defaults to the packaged one)
            features: Previously stored features to seed the ledger with
        """
        self._templates: List[MigrationTemplate] = list(
            templates if templates is not None else load_templates()
        )
        self._features: Dict[str, Feature] = {}
        self._listeners: List[FeatureListener] = []

        for feature in features or []:
            self._features[feature.id] = feature

    @property
    def templates(self) -> List[MigrationTemplate]:
        return list(self._templates)

    def register_feature(self, data: Dict[str, Any]) -> str:
        """Register a new feature for migration.

        No validation is done; registering the same data twice yields two
        features with distinct ids.

        Args:
            data: Feature fields other than id and created_at

        Returns:
            The generated feature id
        """
        fields = {k: v for k, v in data.items() if k not in ('id', 'created_at')}
        fields.setdefault('description', '')
        for list_field in ('base44_usage', 'rest_endpoints', 'dependencies'):
            fields[list_field] = list(fields.get(list_field) or [])

        feature_id = generate_feature_id()
        while feature_id in self._features:
            feature_id = generate_feature_id()

        feature = Feature.from_dict({**fields, 'id': feature_id, 'created_at': datetime.now().isoformat()})
        self._features[feature_id] = feature
        self._notify_listeners(feature)

        logger.info(f"Registered new feature for migration: {feature.name}")
        return feature_id

    def get_feature(self, feature_id: str) -> Optional[Feature]:
        return self._features.get(feature_id)

    def find_template(self, feature: Feature) -> Optional[MigrationTemplate]:
        """First template, in registration order, matching any of the feature's usages."""
        for template in self._templates:
            if template.matches(feature.base44_usage):
                return template
        return None

    def generate_migration_script(self, feature_id: str) -> Optional[str]:
        """Generate replacement code for a feature.

        Returns None both when the id is unknown and when no template
        matches; use get_feature() to tell the two apart.

        Args:
            feature_id: Registered feature id

        Returns:
            Generated REST client, tests and schema as one text blob, or None
        """
        feature = self._features.get(feature_id)
        if feature is None:
            logger.debug(f"No feature registered with id {feature_id}")
            return None

        template = self.find_template(feature)
        if template is None:
            logger.info(f"No migration template matches feature {feature.name}")
            return None

        logger.debug(f"Applying template '{template.key}' to feature {feature.name}")
        script = apply_template(template, feature.name)

        feature.migration_script = script
        feature.rest_endpoints = extract_endpoints(script)
        return script

    def update_feature_status(self, feature_id: str, status: Union[FeatureStatus, str]) -> None:
        """Set a feature's status; unknown ids and unknown statuses are ignored."""
        feature = self._features.get(feature_id)
        if feature is None:
            logger.debug(f"Ignoring status update for unknown feature {feature_id}")
            return

        try:
            feature.status = FeatureStatus(status)
        except ValueError:
            logger.warning(f"Ignoring unknown status {status!r} for feature {feature.name}")
            return
        if feature.status is FeatureStatus.MIGRATED:
            feature.migrated_at = datetime.now().isoformat()

        logger.info(f"Feature {feature.name} is now {feature.status.value}")
        self._notify_listeners(feature)

    def get_features(self) -> List[Feature]:
        return list(self._features.values())

    def get_features_by_status(self, status: Union[FeatureStatus, str]) -> List[Feature]:
        try:
            status = FeatureStatus(status)
        except ValueError:
            return []
        return [f for f in self._features.values() if f.status is status]

    def get_migration_stats(self) -> MigrationStats:
        features = self.get_features()
        return MigrationStats(
            total=len(features),
            migrated=sum(1 for f in features if f.status is FeatureStatus.MIGRATED),
            in_progress=sum(1 for f in features if f.status is FeatureStatus.MIGRATING),
            failed=sum(1 for f in features if f.status is FeatureStatus.FAILED),
            pending=sum(1 for f in features if f.status in _PENDING_STATUSES),
        )

    def on_feature_change(self, listener: FeatureListener) -> None:
        """Call listener synchronously after every registration and status update."""
        self._listeners.append(listener)

    def remove_feature_change_listener(self, listener: FeatureListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_listeners(self, feature: Feature) -> None:
        for listener in list(self._listeners):
            try:
                listener(feature)
            except Exception as e:
                logger.error(f"Error in feature change listener: {e}", exc_info=True)
