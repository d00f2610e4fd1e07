from dotconverge.tui.renderers import ConvergeConsoleUI

__all__ = ["ConvergeConsoleUI"]
