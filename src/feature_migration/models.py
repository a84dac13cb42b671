"""Feature migration data models."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar
from datetime import datetime

from .utils import setup_logging


logger = setup_logging(__name__)

E = TypeVar('E', bound=Enum)


class FeatureStatus(str, Enum):
    """Lifecycle of a feature: detected -> planned -> migrating -> migrated, or failed."""
    DETECTED = "detected"
    PLANNED = "planned"
    MIGRATING = "migrating"
    MIGRATED = "migrated"
    FAILED = "failed"


class FeaturePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PatternKind(str, Enum):
    """Kinds of vendor SDK usage the detector recognises."""
    ENTITY_METHOD = "entity_method"
    FUNCTION_CALL = "function_call"
    AUTH_METHOD = "auth_method"
    IMPORT_STATEMENT = "import_statement"
    DEPENDENCY = "dependency"


def coerce_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    """Convert value to enum_cls, falling back to default with a warning.

    Args:
        enum_cls: Target enum
        value: Enum member or raw value
        default: Member used when value is not a valid member

    Returns:
        The matching member, or default
    """
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} {value!r}, using {default.value!r}")
        return default


@dataclass(frozen=True)
class UsageRecord:
    """One pattern match on one line of one file."""

    file: str
    line: int  # 1-based
    code: str
    pattern: PatternKind
    suggestion: str


@dataclass
class Feature:
    """A unit of Base44 SDK usage slated for migration to the REST API."""

    id: str
    name: str
    description: str
    base44_usage: List[str] = field(default_factory=list)
    rest_endpoints: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    priority: FeaturePriority = FeaturePriority.MEDIUM
    status: FeatureStatus = FeatureStatus.DETECTED
    migration_script: Optional[str] = None
    test_coverage: Optional[float] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    migrated_at: Optional[str] = None

    def __post_init__(self):
        self.priority = coerce_enum(FeaturePriority, self.priority, FeaturePriority.MEDIUM)
        self.status = coerce_enum(FeatureStatus, self.status, FeatureStatus.DETECTED)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = asdict(self)
        data['priority'] = self.priority.value
        data['status'] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Feature':
        """Create Feature from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__annotations__})


@dataclass
class MigrationStats:
    """Aggregate counts over the registry; pending covers detected and planned."""

    total: int = 0
    migrated: int = 0
    in_progress: int = 0
    failed: int = 0
    pending: int = 0
