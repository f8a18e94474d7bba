"""Configuration for the semantic analysis engine.

Each stage has its own dataclass so that weights and thresholds can be
tuned independently. All configs serialize with ``to_dict()`` and load
with ``from_dict()``, ignoring unknown keys so older config files keep
working.

Configuration can be loaded from YAML:

    # eventsem.yaml
    theta:
      pattern_weight: 0.5
      acceptance_threshold: 0.5
    lexicon:
      query_timeout: ${EVENTSEM_LEXICON_TIMEOUT}
    composition:
      max_reduction_steps: 1000

Example:
    from eventsem.config import load_config

    config = load_config()                 # searches cwd and parents
    config = load_config("eventsem.yaml")  # explicit path
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file locations, searched in order
DEFAULT_CONFIG_FILES = [
    "eventsem.yaml",
    "eventsem.yml",
    ".eventsem.yaml",
    ".eventsem.yml",
]


def _coerce(value: Any, default: Any) -> Any:
    """Convert env-expanded strings back to the default's scalar type."""
    if not isinstance(value, str) or isinstance(default, str) or default is None:
        return value
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def _from_flat_dict(cls: type, data: dict[str, Any]) -> Any:
    defaults = cls()
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        if key not in known:
            logger.debug(f"Ignoring unknown {cls.__name__} key: {key}")
            continue
        try:
            kwargs[key] = _coerce(value, getattr(defaults, key))
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {cls.__name__}.{key}: {value!r}", cause=e
            ) from e
    return cls(**kwargs)


def _check_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1], got {value}")


# =============================================================================
# Stage Configurations
# =============================================================================


@dataclass
class LexiconConfig:
    """Configuration for lexical resource queries."""

    query_timeout: float = 0.5
    """Seconds to wait for one resource lookup before degrading to no frames."""

    max_concurrent_queries: int = 16
    """Upper bound on lookups in flight while populating the cache."""

    use_builtin_lexicon: bool = True
    """Consult the bundled English frames when building a default analyzer."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "query_timeout": self.query_timeout,
            "max_concurrent_queries": self.max_concurrent_queries,
            "use_builtin_lexicon": self.use_builtin_lexicon,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LexiconConfig":
        """Deserialize from dictionary."""
        return _from_flat_dict(cls, data)

    def validate(self) -> None:
        if self.query_timeout <= 0:
            raise ConfigurationError("lexicon.query_timeout must be positive")
        if self.max_concurrent_queries < 1:
            raise ConfigurationError("lexicon.max_concurrent_queries must be >= 1")


@dataclass
class ThetaConfig:
    """Configuration for theta-role assignment scoring."""

    pattern_weight: float = 0.5
    """Weight of the syntactic pattern match (slot count and prepositions)."""

    selectional_weight: float = 0.3
    """Weight of selectional restriction satisfaction."""

    frequency_weight: float = 0.2
    """Weight of the frame's corpus frequency."""

    acceptance_threshold: float = 0.5
    """Minimum frame score; below it the fallback defaults are used."""

    ambiguity_epsilon: float = 0.05
    """Frames scoring within this distance of the best are considered tied."""

    fallback_confidence: float = 0.55
    """Confidence for core-slot fallback roles."""

    fallback_oblique_confidence: float = 0.45
    """Confidence for preposition-driven fallback roles."""

    fallback_ceiling: float = 0.6
    """No fallback role is ever reported above this confidence."""

    conflict_penalty: float = 0.15
    """Confidence subtracted when a slot's preferred role was already taken."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "pattern_weight": self.pattern_weight,
            "selectional_weight": self.selectional_weight,
            "frequency_weight": self.frequency_weight,
            "acceptance_threshold": self.acceptance_threshold,
            "ambiguity_epsilon": self.ambiguity_epsilon,
            "fallback_confidence": self.fallback_confidence,
            "fallback_oblique_confidence": self.fallback_oblique_confidence,
            "fallback_ceiling": self.fallback_ceiling,
            "conflict_penalty": self.conflict_penalty,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThetaConfig":
        """Deserialize from dictionary."""
        return _from_flat_dict(cls, data)

    @property
    def strategy_weights(self) -> dict[str, float]:
        return {
            "pattern": self.pattern_weight,
            "selectional": self.selectional_weight,
            "frequency": self.frequency_weight,
        }

    def validate(self) -> None:
        for name, value in self.to_dict().items():
            _check_unit(f"theta.{name}", value)
        total = self.pattern_weight + self.selectional_weight + self.frequency_weight
        if abs(total - 1.0) > 1e-6:
            raise ConfigurationError(f"theta weights must sum to 1.0, got {total:.3f}")
        if self.fallback_confidence > self.fallback_ceiling:
            raise ConfigurationError("theta.fallback_confidence exceeds fallback_ceiling")


@dataclass
class MovementConfig:
    """Configuration for movement detection."""

    detect_passive: bool = True
    detect_wh: bool = True
    detect_relative: bool = True
    detect_raising: bool = True
    detect_tough: bool = True
    detect_existential: bool = True
    detect_topicalization: bool = True

    check_locality: bool = True
    """Emit LocalityViolation diagnostics for chains leaving their domain."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MovementConfig":
        """Deserialize from dictionary."""
        return _from_flat_dict(cls, data)

    def is_enabled(self, kind: str) -> bool:
        return bool(getattr(self, f"detect_{kind}", False))


@dataclass
class EventConfig:
    """Configuration for event composition."""

    include_sub_events: bool = True
    """Build result-state sub-events for causative predicates."""

    max_events_per_sentence: int = 32

    implicit_agent_for_passives: bool = True
    """Insert an implicit existential agent for agentless passives."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "include_sub_events": self.include_sub_events,
            "max_events_per_sentence": self.max_events_per_sentence,
            "implicit_agent_for_passives": self.implicit_agent_for_passives,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventConfig":
        """Deserialize from dictionary."""
        return _from_flat_dict(cls, data)

    def validate(self) -> None:
        if self.max_events_per_sentence < 1:
            raise ConfigurationError("events.max_events_per_sentence must be >= 1")


@dataclass
class CompositionConfig:
    """Configuration for DRS and lambda-term composition."""

    max_reduction_steps: int = 1000
    """Beta/delta steps before ReductionDepthExceeded is raised."""

    max_readings: int = 24
    """Cap on scope readings generated per sentence."""

    build_terms: bool = True
    """Build and reduce lambda terms alongside the DRS."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "max_reduction_steps": self.max_reduction_steps,
            "max_readings": self.max_readings,
            "build_terms": self.build_terms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompositionConfig":
        """Deserialize from dictionary."""
        return _from_flat_dict(cls, data)

    def validate(self) -> None:
        if self.max_reduction_steps < 1:
            raise ConfigurationError("composition.max_reduction_steps must be >= 1")
        if self.max_readings < 1:
            raise ConfigurationError("composition.max_readings must be >= 1")


# =============================================================================
# Combined Configuration
# =============================================================================


@dataclass
class EngineConfig:
    """Complete configuration for the analysis engine."""

    lexicon: LexiconConfig = field(default_factory=LexiconConfig)
    theta: ThetaConfig = field(default_factory=ThetaConfig)
    movement: MovementConfig = field(default_factory=MovementConfig)
    events: EventConfig = field(default_factory=EventConfig)
    composition: CompositionConfig = field(default_factory=CompositionConfig)

    source_path: Path | None = None
    """Path to the config file this was loaded from, if any."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "lexicon": self.lexicon.to_dict(),
            "theta": self.theta.to_dict(),
            "movement": self.movement.to_dict(),
            "events": self.events.to_dict(),
            "composition": self.composition.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        """Deserialize from dictionary."""
        return cls(
            lexicon=LexiconConfig.from_dict(data.get("lexicon") or {}),
            theta=ThetaConfig.from_dict(data.get("theta") or {}),
            movement=MovementConfig.from_dict(data.get("movement") or {}),
            events=EventConfig.from_dict(data.get("events") or {}),
            composition=CompositionConfig.from_dict(data.get("composition") or {}),
        )

    def validate(self) -> "EngineConfig":
        """Check all stage configs, raising ConfigurationError on the first problem."""
        self.lexicon.validate()
        self.theta.validate()
        self.events.validate()
        self.composition.validate()
        return self


# =============================================================================
# Loading
# =============================================================================


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Load engine configuration.

    Args:
        path: Explicit path to config file. If None, searches
              default locations.

    Returns:
        Validated configuration. Defaults when no file is found.

    Raises:
        ConfigurationError: If the file exists but is invalid.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            logger.warning(f"Config file not found: {path}")
            return EngineConfig().validate()
    else:
        config_path = _find_config_file()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return EngineConfig().validate()

    return _load_yaml_config(config_path)


def _find_config_file() -> Path | None:
    """Search for a config file in current and parent directories."""
    current = Path.cwd()

    # Search up to 5 levels up
    for _ in range(5):
        for filename in DEFAULT_CONFIG_FILES:
            config_path = current / filename
            if config_path.exists():
                logger.debug(f"Found config file: {config_path}")
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_yaml_config(path: Path) -> EngineConfig:
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config file {path}", cause=e) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    config = EngineConfig.from_dict(_expand_env_vars(raw))
    config.source_path = path
    return config.validate()


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR} and $VAR references in config values."""
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return os.path.expandvars(data)
    else:
        return data
