from enum import Enum

from dotconverge.models import ResultStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


RESULT_STATUS_STYLE = {
    ResultStatus.SUCCESS: UIStyle.GREEN.value,
    ResultStatus.FAILED: UIStyle.RED.value,
}


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
