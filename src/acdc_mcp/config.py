"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from acdc_mcp.adapters import DEFAULT_SCHEME, Location
from acdc_mcp.search import SearchSettings
from acdc_mcp.tools.builtin import BUILTIN_TOOL_NAMES

CONFIG_FILE_NAME = "acdc_mcp.toml"
DATA_DIR_NAME = ".acdc_mcp"
MAX_RESULTS_CAP = 200

DEFAULT_SERVER_NAME = "acdc-mcp"
DEFAULT_SERVER_VERSION = "0.1.0"
DEFAULT_INSTRUCTIONS = (
    "Markdown knowledge base. Search for relevant documents, then read them by URI."
)

SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*$")
FORBIDDEN_LOCATION_CHARS = (":", "/", "\\")


@dataclass(slots=True, frozen=True)
class ServerMetadata:
    """Server identity announced to clients."""

    name: str
    version: str
    instructions: str


@dataclass(slots=True, frozen=True)
class ContentLocation:
    """Named content root resolved against the config directory."""

    name: str
    description: str
    path: Path
    adapter_type: str | None = None

    def to_location(self) -> Location:
        """Return the adapter-facing location."""
        return Location(name=self.name, base_path=self.path, adapter_type=self.adapter_type)


@dataclass(slots=True, frozen=True)
class ToolOverride:
    """Description override for a built-in tool."""

    name: str
    description: str


@dataclass(slots=True, frozen=True)
class ServerConfig:
    """Fully merged server configuration."""

    config_path: Path
    data_dir: Path
    scheme: str
    cross_ref: bool
    server: ServerMetadata
    content: tuple[ContentLocation, ...]
    search: SearchSettings
    tools: tuple[ToolOverride, ...]

    def tool_description(self, name: str, default: str) -> str:
        """Return the configured description for a tool, or the default."""
        for override in self.tools:
            if override.name == name:
                return override.description
        return default

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for tool responses."""
        return {
            "config_path": str(self.config_path),
            "data_dir": str(self.data_dir),
            "scheme": self.scheme,
            "cross_ref": self.cross_ref,
            "server": {"name": self.server.name, "version": self.server.version},
            "content": [
                {
                    "name": location.name,
                    "description": location.description,
                    "path": str(location.path),
                    "type": location.adapter_type,
                }
                for location in self.content
            ],
            "search": {
                "max_results": self.search.max_results,
                "name_boost": self.search.name_boost,
                "content_boost": self.search.content_boost,
                "keywords_boost": self.search.keywords_boost,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    scheme: str | None = None
    cross_ref: bool | None = None
    max_results: int | None = None


def default_config(config_path: Path) -> ServerConfig:
    """Build default config for a given config file location."""
    resolved = config_path.resolve()
    return ServerConfig(
        config_path=resolved,
        data_dir=resolved.parent / DATA_DIR_NAME,
        scheme=DEFAULT_SCHEME,
        cross_ref=False,
        server=ServerMetadata(
            name=DEFAULT_SERVER_NAME,
            version=DEFAULT_SERVER_VERSION,
            instructions=DEFAULT_INSTRUCTIONS,
        ),
        content=(),
        search=SearchSettings(),
        tools=(),
    )


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load the TOML config file."""
    if not config_path.is_file():
        raise ValueError(f"Config file not found: {config_path}")
    with config_path.open("rb") as handle:
        try:
            payload = tomllib.load(handle)
        except tomllib.TOMLDecodeError as error:
            raise ValueError(f"{config_path.name} is not valid TOML: {error}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"{config_path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _get_array_of_tables(payload: dict[str, object], key: str) -> list[dict[str, object]]:
    value = payload.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ValueError(f"Config section '{key}' must be an array of tables.")
    return value


def _non_empty_string(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_string(value: object, name: str) -> str | None:
    if value is None:
        return None
    return _non_empty_string(value, name)


def merge_config(
    base: ServerConfig, payload: dict[str, object], overrides: CliOverrides
) -> ServerConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    config_dir = base.config_path.parent
    server_payload = _get_table(payload, "server")
    search_payload = _get_table(payload, "search")

    scheme = base.scheme
    if "scheme" in payload:
        scheme = _validate_scheme(payload["scheme"], "scheme")

    cross_ref = base.cross_ref
    if "cross_ref" in payload:
        raw_cross_ref = payload["cross_ref"]
        if not isinstance(raw_cross_ref, bool):
            raise ValueError("Config field 'cross_ref' must be a boolean.")
        cross_ref = raw_cross_ref

    server = ServerMetadata(
        name=_non_empty_string(server_payload.get("name", base.server.name), "server.name"),
        version=_non_empty_string(
            server_payload.get("version", base.server.version), "server.version"
        ),
        instructions=_non_empty_string(
            server_payload.get("instructions", base.server.instructions), "server.instructions"
        ),
    )

    data_dir = base.data_dir
    if "data_dir" in payload:
        data_dir = config_dir / _non_empty_string(payload["data_dir"], "data_dir")

    merged = ServerConfig(
        config_path=base.config_path,
        data_dir=data_dir,
        scheme=scheme,
        cross_ref=cross_ref,
        server=server,
        content=_content_locations(_get_array_of_tables(payload, "content"), config_dir),
        search=_search_settings(search_payload, base.search),
        tools=_tool_overrides(_get_array_of_tables(payload, "tools")),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ServerConfig, overrides: CliOverrides) -> ServerConfig:
    """Apply startup overrides at highest precedence."""
    scheme = config.scheme
    if overrides.scheme is not None:
        scheme = _validate_scheme(overrides.scheme, "overrides.scheme")
    search = config.search
    if overrides.max_results is not None:
        search = replace(
            search,
            max_results=_positive_int_with_cap(
                overrides.max_results, "overrides.max_results", MAX_RESULTS_CAP
            ),
        )
    data_dir = overrides.data_dir or config.data_dir
    return replace(
        config,
        data_dir=data_dir.resolve(),
        scheme=scheme,
        cross_ref=overrides.cross_ref if overrides.cross_ref is not None else config.cross_ref,
        search=search,
    )


def load_effective_config(
    config_path: Path, overrides: CliOverrides | None = None
) -> ServerConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved = config_path.resolve()
    base = default_config(resolved)
    payload = load_config_file(resolved)
    return merge_config(base, payload, overrides or CliOverrides())


def _content_locations(
    entries: list[dict[str, object]], config_dir: Path
) -> tuple[ContentLocation, ...]:
    if not entries:
        raise ValueError("Config section 'content' must define at least one location.")
    locations: list[ContentLocation] = []
    seen: set[str] = set()
    for position, entry in enumerate(entries):
        prefix = f"content[{position}]"
        name = _non_empty_string(entry.get("name"), f"{prefix}.name").strip()
        if any(char in name for char in FORBIDDEN_LOCATION_CHARS):
            raise ValueError(f"Config field '{prefix}.name' must not contain ':', '/' or '\\'.")
        if name in seen:
            raise ValueError(f"Config field '{prefix}.name' duplicates location '{name}'.")
        seen.add(name)

        description = _non_empty_string(entry.get("description"), f"{prefix}.description")
        raw_path = _non_empty_string(entry.get("path"), f"{prefix}.path")
        path = Path(raw_path).expanduser()
        if not path.is_absolute():
            path = config_dir / path
        path = path.resolve()
        if not path.is_dir():
            raise ValueError(f"Config field '{prefix}.path' is not a directory: {path}")

        locations.append(
            ContentLocation(
                name=name,
                description=description,
                path=path,
                adapter_type=_optional_string(entry.get("type"), f"{prefix}.type"),
            )
        )
    return tuple(locations)


def _search_settings(payload: dict[str, object], base: SearchSettings) -> SearchSettings:
    max_results = base.max_results
    if "max_results" in payload:
        max_results = _positive_int_with_cap(
            payload["max_results"], "search.max_results", MAX_RESULTS_CAP
        )
    return SearchSettings(
        max_results=max_results,
        name_boost=_positive_float(payload.get("name_boost"), "search.name_boost", base.name_boost),
        content_boost=_positive_float(
            payload.get("content_boost"), "search.content_boost", base.content_boost
        ),
        keywords_boost=_positive_float(
            payload.get("keywords_boost"), "search.keywords_boost", base.keywords_boost
        ),
    )


def _tool_overrides(entries: list[dict[str, object]]) -> tuple[ToolOverride, ...]:
    overrides: list[ToolOverride] = []
    seen: set[str] = set()
    for position, entry in enumerate(entries):
        prefix = f"tools[{position}]"
        name = _non_empty_string(entry.get("name"), f"{prefix}.name")
        if name not in BUILTIN_TOOL_NAMES:
            raise ValueError(
                f"Config field '{prefix}.name' must be one of: {', '.join(BUILTIN_TOOL_NAMES)}."
            )
        if name in seen:
            raise ValueError(f"Config field '{prefix}.name' duplicates tool '{name}'.")
        seen.add(name)
        description = _non_empty_string(entry.get("description"), f"{prefix}.description")
        overrides.append(ToolOverride(name=name, description=description))
    return tuple(overrides)


def _validate_scheme(value: object, name: str) -> str:
    if not isinstance(value, str) or not SCHEME_PATTERN.match(value):
        raise ValueError(
            f"Config field '{name}' must be a lowercase URI scheme like 'acdc'."
        )
    return value


def _positive_int_with_cap(value: object, name: str, cap: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def _positive_float(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"Config field '{name}' must be a positive number.")
    return float(value)
