"""Configuration loading for autostore.

The configuration is a JSON file holding the platform credentials and the
list of archiving tasks. It is validated and default-filled here, once,
before any network activity.
"""

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DEFAULT_CONFIG_PATH = "./config.json"
DEFAULT_STORE_LIMIT = 100
DEFAULT_TIMEOUT = 120.0

INTELLIX_TRUST_NAME = "IntellixTrust"

REQUIRED_KEYS = ("rootUrl", "user", "password", "organization", "hostID")


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""
    pass


@dataclass(frozen=True)
class FilterOptions:
    """Matcher options for a single filter rule.

    Attributes:
        nocase: Case-insensitive matching
        negate: Invert the rule result
        syntax: 'glob' or 'regex'; None picks by pattern type
            (string = glob, list = regex alternatives)
        missing: 'empty' matches an absent property as '', 'fail' makes
            absence a non-match
    """
    nocase: bool = False
    negate: bool = False
    syntax: Optional[str] = None
    missing: str = "empty"


@dataclass(frozen=True)
class FilterRule:
    name: str
    pattern: Union[str, List[str]]
    options: FilterOptions = field(default_factory=FilterOptions)

    @property
    def syntax(self) -> str:
        if self.options.syntax:
            return self.options.syntax
        return "glob" if isinstance(self.pattern, str) else "regex"


@dataclass(frozen=True)
class SuggestionPolicy:
    """Allows suggestions for one index field, optionally filtered."""
    name: str
    filters: List[FilterRule] = field(default_factory=list)


@dataclass(frozen=True)
class Task:
    """One archiving job: move matching documents from a tray to a cabinet."""
    file_cabinet_id: str
    document_tray_id: str
    store_dialog_id: Optional[str] = None
    limit: int = DEFAULT_STORE_LIMIT
    keep_source: bool = False
    filters: List[FilterRule] = field(default_factory=list)
    suggestions: Optional[List[SuggestionPolicy]] = None
    keep_prefilled_indexes: bool = False
    restrict_suggestions: bool = False
    reintellix_on_failure: bool = False

    def policy_for(self, field_name: str) -> Optional[SuggestionPolicy]:
        for policy in self.suggestions or []:
            if policy.name == field_name:
                return policy
        return None

    @property
    def allowed_intellix_trust(self) -> Optional[Union[str, List[str]]]:
        """Pattern of the IntellixTrust filter, if one is configured."""
        for rule in self.filters:
            if rule.name == INTELLIX_TRUST_NAME:
                return rule.pattern
        return None


@dataclass(frozen=True)
class Config:
    root_url: str
    user: str
    password: str
    organization: str
    host_id: str
    tasks: List[Task]
    timeout: float = DEFAULT_TIMEOUT


def _parse_options(raw: Any, where: str) -> FilterOptions:
    if raw is None:
        return FilterOptions()
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: 'options' must be an object")
    syntax = raw.get("syntax")
    if syntax not in (None, "glob", "regex"):
        raise ConfigError(f"{where}: unknown syntax '{syntax}' (use 'glob' or 'regex')")
    missing = raw.get("missing", "empty")
    if missing not in ("empty", "fail"):
        raise ConfigError(f"{where}: unknown missing policy '{missing}' (use 'empty' or 'fail')")
    # Unknown keys (e.g. other micromatch options) are ignored
    return FilterOptions(
        nocase=bool(raw.get("nocase", False)),
        negate=bool(raw.get("negate", False)),
        syntax=syntax,
        missing=missing,
    )


def parse_filter(raw: Any, where: str) -> FilterRule:
    """Parse and validate one filter rule."""
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: filter must be an object")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ConfigError(f"{where}: filter requires a 'name'")

    pattern = raw.get("pattern")
    if isinstance(pattern, list):
        if not all(isinstance(p, str) for p in pattern):
            raise ConfigError(f"{where}: pattern list must contain strings only")
        pattern = list(pattern)
    elif not isinstance(pattern, str):
        raise ConfigError(f"{where}: 'pattern' must be a string or a list of strings")

    rule = FilterRule(name=name, pattern=pattern,
                      options=_parse_options(raw.get("options"), where))
    if rule.syntax == "regex":
        for source in ([pattern] if isinstance(pattern, str) else pattern):
            try:
                re.compile(source)
            except re.error as e:
                raise ConfigError(f"{where}: invalid regular expression '{source}': {e}")
    return rule


def _parse_filters(raw: Any, where: str) -> List[FilterRule]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"{where}: 'filters' must be a list")
    return [parse_filter(item, f"{where} filter {i + 1}") for i, item in enumerate(raw)]


def _legacy_filters(raw: Dict[str, Any], where: str) -> List[FilterRule]:
    """Upgrade filter keys of the first config format into filter rules."""
    rules = []
    trusts = raw.get("intellixTrust")
    if trusts is not None:
        if isinstance(trusts, str):
            trusts = [trusts]
        if not isinstance(trusts, list):
            raise ConfigError(f"{where}: 'intellixTrust' must be a list of strings")
        rules.append(FilterRule(
            name=INTELLIX_TRUST_NAME,
            pattern=[f"^{re.escape(str(t))}$" for t in trusts],
        ))
    title_mask = raw.get("documentTitleMask")
    if title_mask:
        rules.append(FilterRule(name="Title", pattern=str(title_mask)))
    rules.extend(_parse_filters(raw.get("documentFilter"), where))
    return rules


def _parse_suggestions(raw: Any, where: str) -> Optional[List[SuggestionPolicy]]:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ConfigError(f"{where}: 'suggestions' must be a list")
    policies = []
    for i, item in enumerate(raw):
        item_where = f"{where} suggestion {i + 1}"
        if not isinstance(item, dict) or not item.get("name"):
            raise ConfigError(f"{item_where}: suggestion requires a 'name'")
        policies.append(SuggestionPolicy(
            name=item["name"],
            filters=_parse_filters(item.get("filters"), item_where),
        ))
    return policies


def parse_task(raw: Any, index: int) -> Task:
    """Parse and default-fill one task of the ``autoStore`` list."""
    where = f"Task {index + 1}"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: task must be an object")
    for key in ("fileCabinetID", "documentTrayID"):
        if not raw.get(key):
            raise ConfigError(f"{where}: missing required field '{key}'")

    limit = raw.get("limit", DEFAULT_STORE_LIMIT)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ConfigError(f"{where}: 'limit' must be a positive integer")

    filters = _legacy_filters(raw, where) + _parse_filters(raw.get("filters"), where)

    return Task(
        file_cabinet_id=raw["fileCabinetID"],
        document_tray_id=raw["documentTrayID"],
        store_dialog_id=raw.get("storeDialogID") or None,
        limit=limit,
        keep_source=bool(raw.get("keepSource", False)),
        filters=filters,
        suggestions=_parse_suggestions(raw.get("suggestions"), where),
        keep_prefilled_indexes=bool(raw.get("keepPreFilledIndexes", False)),
        restrict_suggestions=bool(raw.get("restrictSuggestions", False)),
        reintellix_on_failure=bool(raw.get("reintellixOnFailure", False)),
    )


def parse_config(raw: Any, environ: Optional[Dict[str, str]] = None) -> Config:
    """Build a validated Config from decoded JSON.

    ``DOCUWARE_USER`` and ``DOCUWARE_PASSWORD`` in the environment take
    precedence over the file's credentials.
    """
    if environ is None:
        environ = dict(os.environ)
    if not isinstance(raw, dict):
        raise ConfigError("Configuration must be a JSON object")

    raw = dict(raw)
    if environ.get("DOCUWARE_USER"):
        raw["user"] = environ["DOCUWARE_USER"]
    if environ.get("DOCUWARE_PASSWORD"):
        raw["password"] = environ["DOCUWARE_PASSWORD"]

    missing = [key for key in REQUIRED_KEYS if not raw.get(key)]
    if missing:
        raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    root_url = raw["rootUrl"]
    if not isinstance(root_url, str) or not root_url.startswith(("https://", "http://")):
        raise ConfigError(
            f"Invalid rootUrl: {root_url}. Must start with 'https://' or 'http://'"
        )

    tasks = raw.get("autoStore")
    if not isinstance(tasks, list) or not tasks:
        raise ConfigError("'autoStore' must be a non-empty list of tasks")

    timeout = raw.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError("'timeout' must be a positive number of seconds")

    return Config(
        root_url=root_url,
        user=raw["user"],
        password=raw["password"],
        organization=raw["organization"],
        host_id=raw["hostID"],
        tasks=[parse_task(task, i) for i, task in enumerate(tasks)],
        timeout=float(timeout),
    )


def load_config(path: str = DEFAULT_CONFIG_PATH,
                environ: Optional[Dict[str, str]] = None) -> Config:
    """Load and validate the configuration file.

    Raises:
        ConfigError: If the file is missing, not JSON, or invalid
    """
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}")
    return parse_config(raw, environ)
