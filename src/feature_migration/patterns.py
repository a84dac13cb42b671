"""Base44 SDK usage patterns recognised by the detector."""
import re
from dataclasses import dataclass
from typing import List, Pattern

from .models import PatternKind


@dataclass(frozen=True)
class UsagePattern:
    kind: PatternKind
    regex: Pattern
    suggestion: str


# Order is report order. Kinds are independent: a line may match several.
BASE44_PATTERNS: List[UsagePattern] = [
    UsagePattern(
        kind=PatternKind.ENTITY_METHOD,
        regex=re.compile(r'base44Entities\.(\w+)\.(\w+)\('),
        suggestion='Replace with REST API call',
    ),
    UsagePattern(
        kind=PatternKind.FUNCTION_CALL,
        regex=re.compile(r'base44Entities\.functions\.(\w+)\('),
        suggestion='Replace with REST API function call',
    ),
    UsagePattern(
        kind=PatternKind.AUTH_METHOD,
        regex=re.compile(r'base44Auth\.(\w+)\('),
        suggestion='Replace with REST auth API',
    ),
    UsagePattern(
        kind=PatternKind.IMPORT_STATEMENT,
        regex=re.compile(r'import.*base44.*from'),
        suggestion='Remove Base44 import, use REST client instead',
    ),
    UsagePattern(
        kind=PatternKind.DEPENDENCY,
        regex=re.compile(r'@base44/sdk'),
        suggestion='Remove @base44/sdk dependency',
    ),
]

ENTITY_METHOD_RE = BASE44_PATTERNS[0].regex
FUNCTION_CALL_RE = BASE44_PATTERNS[1].regex

SOURCE_EXTENSIONS = ('.ts', '.tsx', '.js', '.jsx')
