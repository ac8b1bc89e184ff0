"""Configuration handling for branch-health"""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from branch_health.logging_config import get_logger
from branch_health.policy_parser import PolicyMapping, parse_policy

logger = get_logger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class StalenessThresholds:
    """Day thresholds for the staleness levels."""

    warning_days: int = 30
    stale_days: int = 60
    critical_days: int = 90

    def __post_init__(self):
        for name in ("warning_days", "stale_days", "critical_days"):
            value = getattr(self, name)
            if not _is_int(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if not self.warning_days < self.stale_days < self.critical_days:
            raise ValueError(
                "staleness thresholds must be ascending (warning < stale < critical), "
                f"got {self.warning_days}/{self.stale_days}/{self.critical_days}"
            )


@dataclass(frozen=True)
class AutoMergePolicy:
    enabled: bool = False
    require_status_checks: bool = True
    require_no_conflicts: bool = True
    fast_forward_only: bool = True


@dataclass(frozen=True)
class AutoDeletePolicy:
    enabled: bool = False
    require_merged: bool = True
    safe_to_delete_patterns: Tuple[str, ...] = ()
    min_age_days: int = 7

    def __post_init__(self):
        if not _is_int(self.min_age_days) or self.min_age_days < 0:
            raise ValueError(f"min_age_days must be a non-negative integer, got {self.min_age_days!r}")


@dataclass(frozen=True)
class ReportingOptions:
    issue_number: Optional[int] = None
    json: bool = True
    markdown: bool = True


@dataclass(frozen=True)
class Config:
    """Effective branch-health policy. Built once per run, never mutated."""

    default_branch: Optional[str] = None
    staleness: StalenessThresholds = field(default_factory=StalenessThresholds)
    ignore_patterns: Tuple[str, ...] = ("main", "master", "develop", "release/*", "hotfix/*")
    auto_merge: AutoMergePolicy = field(default_factory=AutoMergePolicy)
    auto_delete: AutoDeletePolicy = field(default_factory=AutoDeletePolicy)
    dry_run: bool = True
    reporting: ReportingOptions = field(default_factory=ReportingOptions)
    # Top-level document keys without a known meaning
    extras: Mapping[str, Any] = field(default_factory=dict)

    def to_tree(self) -> Dict[str, Any]:
        """Render the config with the policy document's keys."""
        tree: Dict[str, Any] = {
            "defaultBranch": self.default_branch,
            "staleness": {
                "warning": self.staleness.warning_days,
                "stale": self.staleness.stale_days,
                "critical": self.staleness.critical_days,
            },
            "ignoreBranches": list(self.ignore_patterns),
            "autoMerge": {
                "enabled": self.auto_merge.enabled,
                "requireStatusChecks": self.auto_merge.require_status_checks,
                "requireNoConflicts": self.auto_merge.require_no_conflicts,
                "fastForwardOnly": self.auto_merge.fast_forward_only,
            },
            "autoDelete": {
                "enabled": self.auto_delete.enabled,
                "requireMerged": self.auto_delete.require_merged,
                "safeToDeletePatterns": list(self.auto_delete.safe_to_delete_patterns),
                "minAgeDays": self.auto_delete.min_age_days,
            },
            "dryRun": self.dry_run,
            "reporting": {
                "issueNumber": self.reporting.issue_number,
                "json": self.reporting.json,
                "markdown": self.reporting.markdown,
            },
        }
        tree.update(copy.deepcopy(dict(self.extras)))
        return tree

    def get(self, key: str, default=None):
        """Get config value by attribute name."""
        return getattr(self, key, default)

    @classmethod
    def from_tree(cls, tree: Mapping[str, Any]) -> "Config":
        """Build a Config from a document-shaped tree.

        Missing keys and values of the wrong type keep their defaults.
        """
        defaults = cls()
        reader = _TreeReader(tree)

        staleness_tree = reader.section("staleness")
        try:
            staleness = StalenessThresholds(
                warning_days=staleness_tree.integer("warning", defaults.staleness.warning_days),
                stale_days=staleness_tree.integer("stale", defaults.staleness.stale_days),
                critical_days=staleness_tree.integer("critical", defaults.staleness.critical_days),
            )
        except ValueError as e:
            logger.warning(f"Ignoring staleness thresholds: {e}")
            staleness = defaults.staleness

        merge_tree = reader.section("autoMerge")
        auto_merge = AutoMergePolicy(
            enabled=merge_tree.boolean("enabled", defaults.auto_merge.enabled),
            require_status_checks=merge_tree.boolean(
                "requireStatusChecks", defaults.auto_merge.require_status_checks
            ),
            require_no_conflicts=merge_tree.boolean(
                "requireNoConflicts", defaults.auto_merge.require_no_conflicts
            ),
            fast_forward_only=merge_tree.boolean(
                "fastForwardOnly", defaults.auto_merge.fast_forward_only
            ),
        )

        delete_tree = reader.section("autoDelete")
        min_age_days = delete_tree.integer("minAgeDays", defaults.auto_delete.min_age_days)
        if min_age_days < 0:
            logger.warning(f"Ignoring negative autoDelete.minAgeDays: {min_age_days}")
            min_age_days = defaults.auto_delete.min_age_days
        auto_delete = AutoDeletePolicy(
            enabled=delete_tree.boolean("enabled", defaults.auto_delete.enabled),
            require_merged=delete_tree.boolean("requireMerged", defaults.auto_delete.require_merged),
            safe_to_delete_patterns=delete_tree.patterns(
                "safeToDeletePatterns", defaults.auto_delete.safe_to_delete_patterns
            ),
            min_age_days=min_age_days,
        )

        reporting_tree = reader.section("reporting")
        reporting = ReportingOptions(
            issue_number=reporting_tree.optional_integer("issueNumber"),
            json=reporting_tree.boolean("json", defaults.reporting.json),
            markdown=reporting_tree.boolean("markdown", defaults.reporting.markdown),
        )

        default_branch = reader.optional_string("defaultBranch")

        return cls(
            default_branch=default_branch,
            staleness=staleness,
            ignore_patterns=reader.patterns("ignoreBranches", defaults.ignore_patterns),
            auto_merge=auto_merge,
            auto_delete=auto_delete,
            dry_run=reader.boolean("dryRun", defaults.dry_run),
            reporting=reporting,
            extras={k: v for k, v in tree.items() if k not in KNOWN_KEYS},
        )


KNOWN_KEYS = frozenset(Config().to_tree())

DEFAULT_CONFIG = Config()


class _TreeReader:
    """Typed, forgiving access to one mapping of the merged tree."""

    def __init__(self, tree: Any, path: str = ""):
        self.tree = tree if isinstance(tree, Mapping) else {}
        self.path = path

    def _name(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def _mismatch(self, key: str, expected: str, value: Any) -> None:
        logger.warning(f"Config key '{self._name(key)}' should be {expected}, got {value!r}; using default")

    def section(self, key: str) -> "_TreeReader":
        value = self.tree.get(key)
        if value is not None and not isinstance(value, Mapping):
            self._mismatch(key, "a mapping", value)
        return _TreeReader(value, self._name(key))

    def boolean(self, key: str, default: bool) -> bool:
        value = self.tree.get(key)
        if value is None:
            return default
        if not isinstance(value, bool):
            self._mismatch(key, "true or false", value)
            return default
        return value

    def integer(self, key: str, default: int) -> int:
        value = self.tree.get(key)
        if value is None:
            return default
        if not _is_int(value):
            self._mismatch(key, "an integer", value)
            return default
        return value

    def optional_integer(self, key: str) -> Optional[int]:
        value = self.tree.get(key)
        if value is None:
            return None
        if not _is_int(value):
            self._mismatch(key, "an integer", value)
            return None
        return value

    def optional_string(self, key: str) -> Optional[str]:
        value = self.tree.get(key)
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            self._mismatch(key, "a string", value)
            return None
        return value

    def patterns(self, key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
        value = self.tree.get(key)
        if value is None:
            return default
        if not isinstance(value, list):
            self._mismatch(key, "a list", value)
            return default
        # Scalars such as "1234" arrive as numbers; patterns are always text
        return tuple(str(item).lower() if isinstance(item, bool) else str(item) for item in value)


def merge_trees(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge an override tree onto a default tree, one level deep.

    Mapping onto mapping merges shallowly (override keys win, other default
    keys survive). Anything else, lists included, replaces the default.
    """
    result = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged = dict(current)
            merged.update(copy.deepcopy(dict(value)))
            result[key] = merged
        else:
            result[key] = copy.deepcopy(value)
    return result


def merge_config(defaults: Config, overrides: Mapping[str, Any]) -> Config:
    """Apply a parsed policy tree on top of a default Config."""
    return Config.from_tree(merge_trees(defaults.to_tree(), overrides))


def parse_config(text: str, defaults: Config = DEFAULT_CONFIG) -> Config:
    """Parse policy document text and merge it onto the defaults."""
    overrides: PolicyMapping = parse_policy(text)
    return merge_config(defaults, overrides)


def load_config(path: Union[str, Path], defaults: Config = DEFAULT_CONFIG) -> Config:
    """Load the policy document at path, falling back to defaults when absent."""
    config_path = Path(path)
    if not config_path.exists():
        logger.info(f"Config file not found at {config_path}, using defaults")
        return defaults

    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read config file {config_path}: {e}; using defaults")
        return defaults

    logger.debug(f"Loaded policy document from {config_path}")
    return parse_config(text, defaults)
