from typing import Final


APP_NAME: Final[str] = "rule-resolver"
HOME_ENV_VAR: Final[str] = "RULE_RESOLVER_HOME"

CONFIG_FILENAME: Final[str] = "config.json"
RULES_DIRNAME: Final[str] = "rules"
RULE_SUFFIX: Final[str] = ".md"

DEFAULT_TOOL_ID: Final[str] = "any"
DEFAULT_CACHE_MAX_ENTRIES: Final[int] = 256

SOURCE_ID_SEPARATOR: Final[str] = ":"

TOPIC_CLASSIFIERS: Final[tuple[str, ...]] = (
    "headings",
    "none",
)
