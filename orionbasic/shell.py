import argparse
import logging
import re
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.traceback import install

from orionbasic.console import TerminalConsole
from orionbasic.interpreter import Interpreter
from orionbasic.logging import Logger, get_logger

logger = get_logger(__name__)

LINE_ENTRY = re.compile(r'^\s*([0-9]+)\s?(.*)$')

COMMANDS = [
    ("RUN", "Execute the program"),
    ("LIST", "List all program lines"),
    ("NEW", "Clear current program and variables"),
    ("LOAD <file>", "Load program from file"),
    ("SAVE <file>", "Save program to file"),
    ("QUIT", "Exit the interpreter"),
    ("HELP", "Show this help"),
]


class Shell:
    def __init__(self, interpreter: Interpreter = None, console: Console = None):
        self.interpreter = interpreter or Interpreter(console=TerminalConsole())
        self.console = console or Console()

    def report(self, label: str):
        error = self.interpreter.ctx.last_error
        message = str(error) if error is not None else self.interpreter.error[1]
        self.console.print(f"[red]{label}:[/red] ", end="")
        self.console.print(message, markup=False, highlight=False)

    def show_help(self):
        table = Table(title="Available Commands")
        table.add_column("Command", style="cyan")
        table.add_column("Description", style="green")
        for command, description in COMMANDS:
            table.add_row(command, description)
        self.console.print(table)
        self.console.print("\nEnter BASIC code with line numbers to add to program")

    def list_program(self):
        if not len(self.interpreter.program):
            self.console.print("No program in memory.")
            return
        for line in self.interpreter.program:
            self.console.print(f"[cyan]{line.number}[/cyan] ", end="")
            self.console.print(line.text, markup=False, highlight=False)

    def load(self, path: str) -> bool:
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            self.console.print(f"[red]Cannot read {path}:[/red] {e.strerror}")
            return False
        if not self.interpreter.load_program(text):
            self.report("Load Error")
            return False
        self.console.print(f"Loaded {len(self.interpreter.program)} lines from {path}")
        return True

    def save(self, path: str):
        try:
            with open(path, "w", encoding="utf-8") as f:
                listing = self.interpreter.program.listing()
                f.write(listing + "\n" if listing else "")
        except OSError as e:
            self.console.print(f"[red]Cannot write {path}:[/red] {e.strerror}")
            return
        self.console.print(f"Saved {len(self.interpreter.program)} lines to {path}")

    def handle(self, line: str) -> bool:
        """Process one line of shell input; False means quit."""
        command = line.strip()
        upper = command.upper()

        if upper in ("QUIT", "EXIT"):
            return False

        entry = LINE_ENTRY.match(line)
        if entry:
            if not self.interpreter.enter_line(int(entry.group(1)), entry.group(2)):
                self.report("Error")
            return True

        if upper == "HELP":
            self.show_help()
        elif upper == "RUN":
            if not self.interpreter.run():
                self.report("Runtime Error")
            self.console.print("Ready.")
        elif upper == "LIST":
            self.list_program()
        elif upper == "NEW":
            self.interpreter.init()
            self.console.print("Program cleared. Ready.")
        elif upper.startswith("LOAD "):
            self.load(command[5:].strip().strip('"'))
        elif upper.startswith("SAVE "):
            self.save(command[5:].strip().strip('"'))
        elif not self.interpreter.execute_line(command):
            self.report("Error")
        return True

    def loop(self):
        self.console.print(Panel.fit("OrionBASIC Interpreter", style="bold blue"))
        self.console.print("Commands: RUN, LIST, NEW, SAVE, LOAD, QUIT, HELP")
        self.console.print("Ready.")

        while True:
            try:
                line = input("> ")
                if not line.strip():
                    continue
                if not self.handle(line):
                    self.console.print("Goodbye!")
                    break
            except KeyboardInterrupt:
                self.console.print("\nInterrupted. Type QUIT to exit.")
            except EOFError:
                self.console.print("\nGoodbye!")
                break


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orionbasic", description="Line-numbered BASIC interpreter")
    parser.add_argument("program", nargs="?", help="program file to load and run")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-file", default=None, help="also write log records to this file")
    parser.add_argument("-i", "--interactive", action="store_true",
                        help="enter the shell after running the program")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    install()
    Logger(filename=args.log_file, level=getattr(logging, args.log_level))

    shell = Shell()
    if args.program:
        if not shell.load(args.program):
            return 1
        if not shell.interpreter.run():
            shell.report("Runtime Error")
            if not args.interactive:
                return 1
        if not args.interactive:
            return 0
    shell.loop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
