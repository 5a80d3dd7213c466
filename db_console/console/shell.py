"""Interactive browsing shell on top of the session controller."""

from __future__ import annotations

from typing import Callable

from rich.text import Text

from db_console.session.controller import Action, SessionController
from db_console.session.types import Tab

from .surface import RichSurface

HELP_TEXT = """\
Commands:
  dbs                 reload and list databases
  use DB_ID           select a database
  tables              refresh the table list
  open TABLE|N        open a table by name or list position
  info | data         switch tab
  first prev next last
  pagesize N          change rows per page
  query SQL           run SQL (also stored in the editor)
  edit SQL            put SQL in the editor without running it
  run                 run the editor contents
  history             list recent queries
  recall N            copy history entry N into the editor
  export              save the visible data page as CSV
  status              show connectivity
  help | quit"""


class Shell:
    """Line-oriented front end that turns commands into controller actions."""

    def __init__(self, controller: SessionController, surface: RichSurface) -> None:
        self.controller = controller
        self.surface = surface
        self._commands: dict[str, Callable[[str], None]] = {
            "dbs": self._databases,
            "databases": self._databases,
            "use": lambda arg: self.controller.dispatch(Action.SELECT_DATABASE, arg),
            "tables": lambda arg: self.controller.dispatch(Action.REFRESH_TABLES),
            "refresh": lambda arg: self.controller.dispatch(Action.REFRESH_TABLES),
            "open": self._open,
            "info": lambda arg: self.controller.dispatch(Action.SWITCH_TAB, Tab.INFO),
            "data": lambda arg: self.controller.dispatch(Action.SWITCH_TAB, Tab.DATA),
            "first": lambda arg: self.controller.dispatch(Action.FIRST_PAGE),
            "prev": lambda arg: self.controller.dispatch(Action.PREV_PAGE),
            "next": lambda arg: self.controller.dispatch(Action.NEXT_PAGE),
            "last": lambda arg: self.controller.dispatch(Action.LAST_PAGE),
            "pagesize": lambda arg: self.controller.dispatch(Action.SET_PAGE_SIZE, arg),
            "query": self._query,
            "edit": self._edit,
            "run": lambda arg: self.controller.dispatch(Action.RUN_QUERY, self.surface.query_text),
            "history": lambda arg: self.surface.print_history(),
            "recall": self._recall,
            "export": lambda arg: self.controller.dispatch(Action.EXPORT),
            "status": self._status,
            "help": lambda arg: self.surface.console.print(Text(HELP_TEXT)),
        }

    def prompt(self) -> str:
        state = self.controller.state
        location = state.current_db_id or "-"
        if state.current_table:
            location += f"/{state.current_table}"
        return f"{location}> "

    def execute_line(self, line: str) -> bool:
        """Run one command line; returns False when the shell should exit."""
        verb, _, arg = line.strip().partition(" ")
        if not verb:
            return True
        verb = verb.lower()
        if verb in {"quit", "exit"}:
            return False
        handler = self._commands.get(verb)
        if handler is None:
            self.surface.alert(f"Unknown command '{verb}'. Type 'help' for a list.")
            return True
        # Query text is passed through verbatim; other arguments are trimmed.
        handler(arg if verb in {"query", "edit"} else arg.strip())
        return True

    def _databases(self, arg: str) -> None:
        before = self.surface.databases
        self.controller.dispatch(Action.LOAD_DATABASES)
        if self.surface.databases == before:
            self.surface.print_databases()

    def _open(self, arg: str) -> None:
        tables = self.controller.tables
        if arg.isdigit() and arg not in tables:
            position = int(arg)
            if not 1 <= position <= len(tables):
                self.surface.alert(f"No table at position {position}")
                return
            arg = tables[position - 1]
        if not arg:
            self.surface.alert("Usage: open TABLE|N")
            return
        self.controller.dispatch(Action.SELECT_TABLE, arg)

    def _query(self, arg: str) -> None:
        self.surface.query_text = arg
        self.controller.dispatch(Action.RUN_QUERY, arg)

    def _edit(self, arg: str) -> None:
        self.surface.set_query_text(arg)

    def _recall(self, arg: str) -> None:
        if not arg.isdigit():
            self.surface.alert("Usage: recall N")
            return
        self.controller.dispatch(Action.RECALL_QUERY, int(arg) - 1)

    def _status(self, arg: str) -> None:
        if self.surface.connected is None:
            self.surface.console.print(Text("● Unknown", style="dim"))
        elif self.surface.connected:
            self.surface.console.print(Text("● Connected", style="green"))
        else:
            self.surface.console.print(Text("● Disconnected", style="red"))
