"""
Handler options contract.

``validate_options`` checks a raw options mapping against every rule at
once and returns a frozen ``IndexerOptions``. Each violated rule adds one
clause; all clauses are reported together in a single ConfigurationError.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from dynamo_es_stream.errors import ConfigurationError

FieldPath = Union[str, tuple[str, ...]]
Hook = Callable[..., Any]

DEFAULT_SEPARATOR = "."
DEFAULT_RETRY_COUNT = 0

HOOK_OPTIONS = (
    "before_hook",
    "after_hook",
    "record_error_hook",
    "error_hook",
    "transform_record_hook",
    "id_resolver",
    "version_resolver",
)
FIELD_PATH_OPTIONS = ("id_field", "index_field", "type_field", "pick_fields")
FIELD_OPTIONS = ("parent_field", "version_field")
STRING_OPTIONS = ("index", "type")
SEARCH_OPTION_ALIASES = ("elasticsearch", "es")

KNOWN_OPTIONS = frozenset(
    HOOK_OPTIONS
    + FIELD_PATH_OPTIONS
    + FIELD_OPTIONS
    + STRING_OPTIONS
    + SEARCH_OPTION_ALIASES
    + ("index_prefix", "separator", "upsert", "retry_options")
)
RETRY_OPTION_KEYS = frozenset(
    ("retries", "factor", "min_timeout", "max_timeout", "randomize")
)

# First major/minor/patch run in a loosely formatted version string
_VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")
MAPPING_TYPES_REMOVED_IN = 7


@dataclass(frozen=True)
class RetryOptions:
    """Retry policy for the bulk call; retries=0 means a single attempt."""

    retries: int = DEFAULT_RETRY_COUNT
    factor: float = 2.0
    min_timeout: float = 1.0
    max_timeout: Optional[float] = None
    randomize: bool = False


@dataclass(frozen=True)
class SearchOptions:
    """Elasticsearch client construction and bulk request options."""

    client: Any = None
    bulk: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    client_kwargs: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    api_version: Optional[str] = None


@dataclass(frozen=True)
class IndexerOptions:  # pylint: disable=too-many-instance-attributes
    """Validated, immutable handler configuration."""

    index: Optional[str] = None
    index_field: Optional[FieldPath] = None
    index_prefix: str = ""
    type: Optional[str] = None
    type_field: Optional[FieldPath] = None
    id_field: Optional[FieldPath] = None
    id_resolver: Optional[Hook] = None
    version_field: Optional[str] = None
    version_resolver: Optional[Hook] = None
    parent_field: Optional[str] = None
    pick_fields: Optional[FieldPath] = None
    separator: str = DEFAULT_SEPARATOR
    upsert: bool = False
    retry: RetryOptions = field(default_factory=RetryOptions)
    search: SearchOptions = field(default_factory=SearchOptions)
    before_hook: Optional[Hook] = None
    after_hook: Optional[Hook] = None
    record_error_hook: Optional[Hook] = None
    error_hook: Optional[Hook] = None
    transform_record_hook: Optional[Hook] = None

    @property
    def resolves_version(self) -> bool:
        """True when every action carries an external version."""
        return bool(self.version_field or self.version_resolver)


def coerce_major_version(value: str) -> Optional[int]:
    """Return the major version found in a loose version string."""
    match = _VERSION_PATTERN.search(value)
    if not match:
        return None
    return int(match.group(1))


def requires_mapping_type(search_options: Mapping[str, Any]) -> bool:
    """
    True when the target cluster still uses mapping types.

    Clusters before 7.x need a document type on every action, so either
    ``type`` or ``type_field`` is mandatory; later clusters make it optional.
    """
    api_version = search_options.get("api_version")
    if not isinstance(api_version, str):
        return False
    major = coerce_major_version(api_version)
    return major is not None and major < MAPPING_TYPES_REMOVED_IN


def _present(options: Mapping[str, Any], key: str) -> bool:
    return options.get(key) is not None


def _is_field(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def _is_field_path(value: Any) -> bool:
    if _is_field(value):
        return True
    return (
        isinstance(value, (list, tuple))
        and len(value) > 0
        and all(_is_field(item) for item in value)
    )


def _check_types(options: Mapping[str, Any], errors: list[str]) -> None:
    for key in options:
        if key not in KNOWN_OPTIONS:
            errors.append(f'"{key}" is not allowed')

    for key in SEARCH_OPTION_ALIASES:
        if _present(options, key):
            _check_search_options(key, options[key], errors)

    for key in HOOK_OPTIONS:
        if _present(options, key) and not callable(options[key]):
            errors.append(f'"{key}" must be callable')

    if _present(options, "separator") and not isinstance(
        options["separator"], str
    ):
        errors.append('"separator" must be a string')

    for key in STRING_OPTIONS + ("index_prefix",):
        if _present(options, key) and not _is_field(options[key]):
            errors.append(f'"{key}" must be a non-empty string')

    for key in FIELD_PATH_OPTIONS:
        if _present(options, key) and not _is_field_path(options[key]):
            errors.append(
                f'"{key}" must be a non-empty string '
                "or a non-empty list of non-empty strings"
            )

    for key in FIELD_OPTIONS:
        if _present(options, key) and not _is_field(options[key]):
            errors.append(f'"{key}" must be a non-empty string')

    if _present(options, "upsert") and not isinstance(options["upsert"], bool):
        errors.append('"upsert" must be a boolean')

    if _present(options, "retry_options"):
        _check_retry_options(options["retry_options"], errors)


def _check_search_options(name: str, value: Any, errors: list[str]) -> None:
    if not isinstance(value, Mapping):
        errors.append(f'"{name}" must be a mapping')
        return

    client = value.get("client")
    if client is not None and not callable(getattr(client, "bulk", None)):
        errors.append(f'"{name}.client" must be an object with a callable "bulk"')

    bulk = value.get("bulk")
    if bulk is not None:
        if not isinstance(bulk, Mapping):
            errors.append(f'"{name}.bulk" must be a mapping')
        elif "body" in bulk:
            errors.append(f'"{name}.bulk.body" is not allowed')

    api_version = value.get("api_version")
    if api_version is not None and (
        not isinstance(api_version, str)
        or coerce_major_version(api_version) is None
    ):
        errors.append(f'"{name}.api_version" must be a version string')


def _check_retry_options(value: Any, errors: list[str]) -> None:
    if not isinstance(value, Mapping):
        errors.append('"retry_options" must be a mapping')
        return

    for key in value:
        if key not in RETRY_OPTION_KEYS:
            errors.append(f'"retry_options.{key}" is not allowed')

    retries = value.get("retries")
    if retries is not None and (
        isinstance(retries, bool) or not isinstance(retries, int) or retries < 0
    ):
        errors.append('"retry_options.retries" must be a non-negative integer')

    for key in ("factor", "min_timeout", "max_timeout"):
        number = value.get(key)
        if number is not None and (
            isinstance(number, bool)
            or not isinstance(number, (int, float))
            or number < 0
        ):
            errors.append(f'"retry_options.{key}" must be a non-negative number')

    randomize = value.get("randomize")
    if randomize is not None and not isinstance(randomize, bool):
        errors.append('"retry_options.randomize" must be a boolean')


def _check_peers(options: Mapping[str, Any], errors: list[str]) -> None:
    if _present(options, "elasticsearch") and _present(options, "es"):
        errors.append('"elasticsearch" conflicts with forbidden peer "es"')

    for first, second in (
        ("id_field", "id_resolver"),
        ("version_field", "version_resolver"),
    ):
        if _present(options, first) and _present(options, second):
            errors.append(
                "options contain a conflict between optional exclusive "
                f"peers [{first}, {second}]"
            )

    exclusive = [("index", "index_field")]
    search_options = options.get("elasticsearch") or options.get("es") or {}
    if isinstance(search_options, Mapping) and requires_mapping_type(
        search_options
    ):
        exclusive.append(("type", "type_field"))
    elif _present(options, "type") and _present(options, "type_field"):
        errors.append(
            "options contain a conflict between optional exclusive "
            "peers [type, type_field]"
        )

    for first, second in exclusive:
        if _present(options, first) and _present(options, second):
            errors.append(
                "options contain a conflict between exclusive "
                f"peers [{first}, {second}]"
            )
        elif not (_present(options, first) or _present(options, second)):
            errors.append(
                f"options must contain at least one of [{first}, {second}]"
            )

    if _present(options, "index_prefix"):
        if _present(options, "index"):
            errors.append('"index" conflicts with forbidden peer "index_prefix"')
        if not _present(options, "index_field"):
            errors.append('"index_prefix" missing required peer "index_field"')


def _freeze_path(value: Any) -> Optional[FieldPath]:
    if value is None or isinstance(value, str):
        return value
    return tuple(value)


def _build_search_options(raw: Optional[Mapping[str, Any]]) -> SearchOptions:
    if not raw:
        return SearchOptions()
    client_kwargs = {
        key: value
        for key, value in raw.items()
        if key not in ("client", "bulk", "api_version")
    }
    return SearchOptions(
        client=raw.get("client"),
        bulk=MappingProxyType(dict(raw.get("bulk") or {})),
        client_kwargs=MappingProxyType(client_kwargs),
        api_version=raw.get("api_version"),
    )


def _build_retry_options(raw: Optional[Mapping[str, Any]]) -> RetryOptions:
    if not raw:
        return RetryOptions()
    return RetryOptions(
        **{key: value for key, value in raw.items() if value is not None}
    )


def validate_options(options: Optional[Mapping[str, Any]]) -> IndexerOptions:
    """
    Validate raw handler options and return the normalized configuration.

    Args:
        options: Mapping of snake_case option names to values

    Returns:
        Frozen IndexerOptions

    Raises:
        ConfigurationError: Listing every violated rule, not just the first
    """
    if options is None:
        raise ConfigurationError.from_clauses(['"options" is required'])
    if not isinstance(options, Mapping):
        raise ConfigurationError.from_clauses(['"options" must be a mapping'])

    errors: list[str] = []
    _check_types(options, errors)
    _check_peers(options, errors)
    if errors:
        raise ConfigurationError.from_clauses(errors)

    separator = options.get("separator")
    return IndexerOptions(
        index=options.get("index"),
        index_field=_freeze_path(options.get("index_field")),
        index_prefix=options.get("index_prefix") or "",
        type=options.get("type"),
        type_field=_freeze_path(options.get("type_field")),
        id_field=_freeze_path(options.get("id_field")),
        id_resolver=options.get("id_resolver"),
        version_field=options.get("version_field"),
        version_resolver=options.get("version_resolver"),
        parent_field=options.get("parent_field"),
        pick_fields=_freeze_path(options.get("pick_fields")),
        separator=DEFAULT_SEPARATOR if separator is None else separator,
        upsert=bool(options.get("upsert", False)),
        retry=_build_retry_options(options.get("retry_options")),
        search=_build_search_options(
            options.get("elasticsearch") or options.get("es")
        ),
        before_hook=options.get("before_hook"),
        after_hook=options.get("after_hook"),
        record_error_hook=options.get("record_error_hook"),
        error_hook=options.get("error_hook"),
        transform_record_hook=options.get("transform_record_hook"),
    )


__all__ = [
    "IndexerOptions",
    "RetryOptions",
    "SearchOptions",
    "coerce_major_version",
    "requires_mapping_type",
    "validate_options",
]
