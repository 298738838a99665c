import os
from collections.abc import Mapping
from dataclasses import dataclass

_ENV_PREFIX = "GQL_HARVEST_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: '{value}'")


@dataclass(frozen=True)
class ExtractorSettings:
    """Names that mark the query sub-language inside component source."""

    tag_name: str = "graphql"
    module_name: str = "gatsby"
    static_query_component: str = "StaticQuery"
    query_attribute: str = "query"
    hook_name: str = "useStaticQuery"
    coalesce_in_flight: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractorSettings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(key: str, default: str) -> str:
            return env.get(f"{_ENV_PREFIX}{key}", default)

        coalesce_raw = env.get(f"{_ENV_PREFIX}COALESCE")
        return cls(
            tag_name=_get("TAG_NAME", defaults.tag_name),
            module_name=_get("MODULE_NAME", defaults.module_name),
            static_query_component=_get("STATIC_QUERY_COMPONENT", defaults.static_query_component),
            query_attribute=_get("QUERY_ATTRIBUTE", defaults.query_attribute),
            hook_name=_get("HOOK_NAME", defaults.hook_name),
            coalesce_in_flight=(
                defaults.coalesce_in_flight
                if coalesce_raw is None
                else _parse_bool(f"{_ENV_PREFIX}COALESCE", coalesce_raw)
            ),
        )
