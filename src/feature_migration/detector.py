"""Base44 usage detector.

Scans source files line by line for Base44 SDK usage, reports what to replace,
and registers the usages it can name as features in a FeatureRegistry.
"""
import abc
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .models import FeaturePriority, FeatureStatus, PatternKind, UsageRecord
from .patterns import BASE44_PATTERNS, ENTITY_METHOD_RE, FUNCTION_CALL_RE, SOURCE_EXTENSIONS, UsagePattern
from .registry import FeatureRegistry
from .utils import read_text_file, setup_logging


logger = setup_logging(__name__)

DEFAULT_BASE_PATH = 'src'
SKIPPED_DIRECTORIES = {'node_modules'}


class FileLister(abc.ABC):
    """Decides which files a codebase scan covers."""

    @abc.abstractmethod
    def list_source_files(self, root: str) -> List[str]:
        """List source files under root, in scan order."""
        pass


class FixedFileLister(FileLister):
    """Always returns the same explicit list of paths; root is ignored."""

    def __init__(self, files: Iterable[str]):
        self.files = list(files)

    def list_source_files(self, root: str) -> List[str]:
        return list(self.files)


class DirectoryFileLister(FileLister):
    """Walks root recursively and keeps files with a source extension."""

    def __init__(self, extensions: Sequence[str] = SOURCE_EXTENSIONS):
        self.extensions = tuple(extensions)

    def list_source_files(self, root: str) -> List[str]:
        base = Path(root)
        if not base.is_dir():
            logger.warning(f"Scan root {root} is not a directory")
            return []

        files = []
        for dirpath, dirnames, filenames in os.walk(base):
            # Prune hidden and dependency directories in place
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith('.') and d not in SKIPPED_DIRECTORIES
            )
            for filename in sorted(filenames):
                if filename.endswith(self.extensions):
                    files.append(os.path.join(dirpath, filename))
        return files


class Base44Detector:
    """Scans the codebase for Base44 SDK usage and suggests migrations."""

    def __init__(
        self,
        registry: FeatureRegistry,
        file_lister: Optional[FileLister] = None,
        base_path: str = DEFAULT_BASE_PATH,
        patterns: Sequence[UsagePattern] = BASE44_PATTERNS,
    ):
        self.registry = registry
        self.file_lister = file_lister or DirectoryFileLister()
        self.base_path = base_path
        self.patterns = list(patterns)

    def scan_file(self, file_path: str) -> List[UsageRecord]:
        """Scan a file for Base44 usage.

        A file that cannot be read is logged and yields no records, so one bad
        file never aborts a codebase scan.

        Args:
            file_path: Path to a text source file

        Returns:
            Usage records in file order, one per matching pattern per line
        """
        content = read_text_file(file_path, logger)
        if content is None:
            return []

        usages = []
        for index, line in enumerate(content.split('\n')):
            for pattern in self.patterns:
                if pattern.regex.search(line):
                    usages.append(UsageRecord(
                        file=file_path,
                        line=index + 1,
                        code=line.strip(),
                        pattern=pattern.kind,
                        suggestion=pattern.suggestion,
                    ))
        return usages

    def scan_codebase(self, base_path: Optional[str] = None) -> List[UsageRecord]:
        """Scan every file the file lister returns, in lister order."""
        root = base_path or self.base_path
        files = self.file_lister.list_source_files(root)
        logger.debug(f"Scanning {len(files)} files under {root}")

        all_usages = []
        for file_path in files:
            all_usages.extend(self.scan_file(file_path))

        logger.info(f"Found {len(all_usages)} Base44 usage instances in {len(files)} files")
        return all_usages

    def generate_migration_suggestions(self, base_path: Optional[str] = None) -> List[str]:
        """Print a per-file report and register a feature for each named usage.

        Returns:
            Ids of the features that were registered
        """
        usages = self.scan_codebase(base_path)

        if not usages:
            print("✅ No Base44 usage detected in codebase")
            return []

        print(f"🔍 Found {len(usages)} Base44 usage instances:")
        print()

        for file_path, file_usages in group_by_file(usages).items():
            print(f"📁 {file_path}:")
            for usage in file_usages:
                print(f"  {usage.line}: {usage.code}")
                print(f"    💡 {usage.suggestion}")
            print()

        feature_ids = []
        for feature in extract_features(usages):
            feature_id = self.registry.register_feature(feature)
            feature_ids.append(feature_id)
            print(f"📝 Auto-registered feature: {feature['name']} ({feature_id})")

        return feature_ids

    def check_for_new_usage(self, base_path: Optional[str] = None) -> bool:
        """CI gate: True when the codebase is free of Base44 usage."""
        usages = self.scan_codebase(base_path)

        if usages:
            print("❌ Base44 usage detected! Please migrate to REST API:")
            for usage in usages:
                print(f"  {usage.file}:{usage.line} - {usage.suggestion}")
            return False

        return True


def group_by_file(usages: Iterable[UsageRecord]) -> Dict[str, List[UsageRecord]]:
    by_file: Dict[str, List[UsageRecord]] = {}
    for usage in usages:
        by_file.setdefault(usage.file, []).append(usage)
    return by_file


def feature_name_for(usage: UsageRecord) -> Optional[str]:
    """Feature name for a usage, or None for kinds that are not auto-extracted."""
    if usage.pattern is PatternKind.ENTITY_METHOD:
        match = ENTITY_METHOD_RE.search(usage.code)
        if match:
            return f"{match.group(1)}.{match.group(2)}"
    elif usage.pattern is PatternKind.FUNCTION_CALL:
        match = FUNCTION_CALL_RE.search(usage.code)
        if match:
            return f"function.{match.group(1)}"
    return None


def extract_features(usages: Iterable[UsageRecord]) -> List[Dict]:
    """Turn usage records into feature registrations, first occurrence per name wins."""
    features = []
    seen = set()

    for usage in usages:
        name = feature_name_for(usage)
        if not name or name in seen:
            continue
        seen.add(name)
        features.append({
            'name': name,
            'description': f"Auto-detected Base44 usage: {name}",
            'base44_usage': [usage.code],
            'rest_endpoints': [],
            'dependencies': [],
            'priority': FeaturePriority.MEDIUM,
            'status': FeatureStatus.DETECTED,
        })

    return features
