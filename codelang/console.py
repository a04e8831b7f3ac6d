import builtins
import sys
from typing import List, Optional, TextIO


class ConsoleIO:
    """Line-oriented console used by DISPLAY and SCAN.

    Output goes to `out` (stdout by default) and error reports to `err`
    (stderr by default). Input is read with `builtins.input`, looked up at
    call time so it can be replaced in tests.
    """
    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self._out = out
        self._err = err
        self.lines_read = 0

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def write_line(self, text: str):
        print(text, file=self.out)

    def report(self, message: str):
        print(message, file=self.err)

    def read_line(self) -> str:
        """Read one line of input; end of input reads as an empty line."""
        try:
            line = builtins.input()
        except EOFError:
            line = ''
        self.lines_read += 1
        return line


class ScriptedConsole(ConsoleIO):
    """A console fed from a fixed list of input lines, capturing all output."""
    def __init__(self, inputs: Optional[List[str]] = None):
        super().__init__()
        self.inputs = list(inputs or [])
        self.output: List[str] = []
        self.reports: List[str] = []

    def write_line(self, text: str):
        self.output.append(text)

    def report(self, message: str):
        self.reports.append(message)

    def read_line(self) -> str:
        self.lines_read += 1
        if not self.inputs:
            return ''
        return self.inputs.pop(0)

    @property
    def text(self) -> str:
        return ''.join(line + '\n' for line in self.output)
