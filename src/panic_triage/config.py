"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from panic_triage.aggregate import Similarity

CONFIG_FILE_NAME = "panic_triage.toml"


@dataclass(slots=True, frozen=True)
class TriageConfig:
    """Fully merged pipeline configuration."""

    source_root: Path
    guess_paths: bool = True
    augment: bool = True
    similarity: Similarity = Similarity.ANY_POINTER

    def to_public_dict(self) -> dict[str, object]:
        """Return a serializable snapshot."""
        return {
            "source_root": str(self.source_root),
            "parse": {"guess_paths": self.guess_paths},
            "augment": {"enabled": self.augment},
            "aggregate": {"similarity": self.similarity.value},
        }


@dataclass(slots=True, frozen=True)
class ConfigOverrides:
    """Optional caller overrides applied at highest precedence."""

    source_root: Path | None = None
    guess_paths: bool | None = None
    augment: bool | None = None
    similarity: str | None = None


def default_config(source_root: Path) -> TriageConfig:
    """Build default config for a given source tree."""
    return TriageConfig(source_root=source_root.resolve())


def load_config_file(source_root: Path) -> dict[str, object]:
    """Load optional panic_triage.toml from the source root."""
    config_path = source_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def parse_similarity(value: object, name: str, default: Similarity) -> Similarity:
    """Map a similarity name such as "any_pointer" to its enum member."""
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    try:
        return Similarity(value.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in Similarity)
        raise ValueError(f"Config field '{name}' must be one of {allowed}.") from None


def merge_config(
    base: TriageConfig, payload: dict[str, object], overrides: ConfigOverrides
) -> TriageConfig:
    """Merge defaults, config file, then caller overrides."""
    parse_payload = _get_table(payload, "parse")
    augment_payload = _get_table(payload, "augment")
    aggregate_payload = _get_table(payload, "aggregate")

    merged = TriageConfig(
        source_root=base.source_root,
        guess_paths=_optional_bool(
            parse_payload.get("guess_paths"), "parse.guess_paths", base.guess_paths
        ),
        augment=_optional_bool(augment_payload.get("enabled"), "augment.enabled", base.augment),
        similarity=parse_similarity(
            aggregate_payload.get("similarity"), "aggregate.similarity", base.similarity
        ),
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: TriageConfig, overrides: ConfigOverrides) -> TriageConfig:
    """Apply caller overrides at highest precedence."""
    source_root = overrides.source_root or config.source_root
    return TriageConfig(
        source_root=source_root.resolve(),
        guess_paths=_optional_bool(
            overrides.guess_paths, "overrides.guess_paths", config.guess_paths
        ),
        augment=_optional_bool(overrides.augment, "overrides.augment", config.augment),
        similarity=parse_similarity(
            overrides.similarity, "overrides.similarity", config.similarity
        ),
    )


def load_effective_config(
    source_root: Path, overrides: ConfigOverrides | None = None
) -> TriageConfig:
    """Load effective config using merge order defaults -> file -> overrides."""
    resolved_root = source_root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or ConfigOverrides())
