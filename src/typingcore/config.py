"""Configuration values for the typingcore practice engine."""

from __future__ import annotations

from typing import Dict, Any, Iterable, Optional, Tuple
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


def _is_whitespace(char: str) -> bool:
    return char != "" and char.isspace()


@dataclass(frozen=True)
class MatchPolicy:
    """Rules used to compare a typed character with the expected one."""
    case_sensitive: bool = True
    ignore_whitespace_errors: bool = False
    allow_backspace: bool = True

    def matches(self, typed: str, expected: str) -> bool:
        """Check whether ``typed`` counts as a correct keystroke for ``expected``."""
        if not self.case_sensitive:
            typed = typed.lower()
            expected = expected.lower()

        if self.ignore_whitespace_errors and (
            _is_whitespace(typed) or _is_whitespace(expected)
        ):
            # Any whitespace is equivalent to any other whitespace
            return typed.strip() == expected.strip()

        return typed == expected

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MatchPolicy:
        """Create MatchPolicy from dictionary."""
        default = cls()
        return cls(
            case_sensitive=bool(data.get("caseSensitive", default.case_sensitive)),
            ignore_whitespace_errors=bool(
                data.get("ignoreWhitespaceErrors", default.ignore_whitespace_errors)
            ),
            allow_backspace=bool(data.get("allowBackspace", default.allow_backspace)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert MatchPolicy to dictionary."""
        return {
            "caseSensitive": self.case_sensitive,
            "ignoreWhitespaceErrors": self.ignore_whitespace_errors,
            "allowBackspace": self.allow_backspace,
        }


def _threshold_values(value: Any, default: Tuple[float, ...], name: str) -> Tuple[float, ...]:
    """Get a sequence of thresholds, or the defaults when ``value`` is not one."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    logger.warning("Invalid %s %r, using defaults", name, value)
    return default


def _clean_thresholds(values: Iterable[Any], upper: Optional[float] = None) -> Tuple[float, ...]:
    """Drop invalid or out-of-range thresholds; sort and deduplicate the rest."""
    cleaned = set()
    for value in values:
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid milestone threshold %r", value)
            continue
        if number < 0 or (upper is not None and number > upper):
            logger.warning("Ignoring out-of-range milestone threshold %r", value)
            continue
        cleaned.add(number)
    return tuple(sorted(cleaned))


@dataclass(frozen=True)
class MilestoneConfig:
    """Thresholds announced once per session by the stats tracker."""
    wpm_thresholds: Tuple[float, ...] = (10, 20, 30, 40, 50, 60, 70, 80)
    accuracy_thresholds: Tuple[float, ...] = (90, 95, 98, 99)
    min_characters: int = 10  # forward keystrokes before anything is announced

    def __post_init__(self) -> None:
        object.__setattr__(self, "wpm_thresholds", _clean_thresholds(self.wpm_thresholds))
        object.__setattr__(
            self, "accuracy_thresholds", _clean_thresholds(self.accuracy_thresholds, upper=100.0)
        )
        try:
            min_characters = max(0, int(self.min_characters))
        except (TypeError, ValueError):
            logger.warning("Invalid min_characters %r, using 0", self.min_characters)
            min_characters = 0
        object.__setattr__(self, "min_characters", min_characters)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MilestoneConfig:
        """Create MilestoneConfig from dictionary."""
        default = cls()
        return cls(
            wpm_thresholds=_threshold_values(
                data.get("wpmThresholds", default.wpm_thresholds),
                default.wpm_thresholds, "wpmThresholds",
            ),
            accuracy_thresholds=_threshold_values(
                data.get("accuracyThresholds", default.accuracy_thresholds),
                default.accuracy_thresholds, "accuracyThresholds",
            ),
            min_characters=data.get("minCharacters", default.min_characters),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert MilestoneConfig to dictionary."""
        return {
            "wpmThresholds": list(self.wpm_thresholds),
            "accuracyThresholds": list(self.accuracy_thresholds),
            "minCharacters": self.min_characters,
        }


RESET_MODES = ("sentence", "word")


def _section(data: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    """Get a config section, or None when it is missing or not a mapping."""
    if name not in data:
        return None
    section = data[name]
    if not isinstance(section, dict):
        logger.warning("Config section %r is not a mapping, using defaults", name)
        return None
    return section


@dataclass
class BehaviorConfig:
    """Caller-side behavior settings."""
    idle_timeout_ms: int = 0  # 0 disables idle restart
    reset_mode: str = "sentence"  # "sentence" or "word"

    def __post_init__(self) -> None:
        if self.reset_mode not in RESET_MODES:
            logger.warning("Unknown reset mode %r, using 'sentence'", self.reset_mode)
            self.reset_mode = "sentence"
        try:
            self.idle_timeout_ms = max(0, int(self.idle_timeout_ms))
        except (TypeError, ValueError):
            logger.warning("Invalid idle timeout %r, disabling", self.idle_timeout_ms)
            self.idle_timeout_ms = 0


@dataclass
class Config:
    """Main configuration class."""
    match: MatchPolicy = field(default_factory=MatchPolicy)
    milestones: MilestoneConfig = field(default_factory=MilestoneConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Config:
        """Create Config from dictionary."""
        config = cls()

        match_data = _section(data, "match")
        if match_data is not None:
            config.match = MatchPolicy.from_dict(match_data)

        milestone_data = _section(data, "milestones")
        if milestone_data is not None:
            config.milestones = MilestoneConfig.from_dict(milestone_data)

        behavior_data = _section(data, "behavior")
        if behavior_data is not None:
            config.behavior = BehaviorConfig(
                idle_timeout_ms=behavior_data.get("idleTimeoutMs", config.behavior.idle_timeout_ms),
                reset_mode=behavior_data.get("resetMode", config.behavior.reset_mode),
            )

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert Config to dictionary."""
        return {
            "match": self.match.to_dict(),
            "milestones": self.milestones.to_dict(),
            "behavior": {
                "idleTimeoutMs": self.behavior.idle_timeout_ms,
                "resetMode": self.behavior.reset_mode,
            },
        }
