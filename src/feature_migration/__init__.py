"""Base44 to REST API feature migration tooling."""

__version__ = "1.0.0"

from .detector import Base44Detector, DirectoryFileLister, FileLister, FixedFileLister
from .models import Feature, FeaturePriority, FeatureStatus, MigrationStats, PatternKind, UsageRecord
from .registry import FeatureRegistry
from .templates import MigrationTemplate, render_template
from .utils import setup_logging

__all__ = [
    'Base44Detector',
    'DirectoryFileLister',
    'Feature',
    'FeaturePriority',
    'FeatureRegistry',
    'FeatureStatus',
    'FileLister',
    'FixedFileLister',
    'MigrationStats',
    'MigrationTemplate',
    'PatternKind',
    'UsageRecord',
    'render_template',
    'setup_logging',
]
