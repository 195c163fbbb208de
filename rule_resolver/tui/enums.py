from enum import Enum

from rule_resolver.rules.models import Origin


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


ORIGIN_STYLE = {
    Origin.GLOBAL: UIStyle.DIM.value,
    Origin.WORKSPACE: UIStyle.CYAN.value,
    Origin.PROJECT: UIStyle.GREEN.value,
    Origin.REFERENCE: UIStyle.MAGENTA.value,
}
