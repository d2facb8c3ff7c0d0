# minishell

The working parts of a small POSIX-style shell as a Python package. It
takes a stream of already-lexed tokens, builds a command table from it and
runs it: built-in commands, `$` expansion, `PATH` lookup, redirections,
here-documents and pipelines.

## What it does

- **Built-in commands**: `cd`, `pwd`, `echo` (with leading `-n` options),
  `env`, `export`, `unset` and `exit`. Each sets the shell's exit status:
  `0` on success, `1` for a bad identifier, too many arguments or a failed
  `cd`, `2` when `env` is given an argument. `exit` raises `ShellExit`
  carrying the status to leave with.
- **Environment**: the shell keeps its own list of `NAME=value` entries.
  `export` with no arguments prints a sorted `declare -x` listing; with
  arguments it validates each name, strips quote characters and adds or
  replaces entries. `unset` removes the named entries.
- **Dollar expansion**: `expand` replaces `$NAME` and `$?` in a line with
  values from the shell's environment and last exit status; unset names
  expand to nothing.
- **Command lookup**: `resolve_command` searches `PATH`. The command name
  itself is tried in place of the first `PATH` directory, the remaining
  directories in order. Unknown commands give status 127, directories 126.
- **Redirections**: `<`, `>`, `>>` and `<<`. A target that cannot be opened
  sets status 127 when it does not exist, 126 when permission is denied,
  and 1 otherwise. Here-document lines are `$`-expanded and written to a
  temporary file that becomes the command's input.
- **Pipelines**: each stage runs as its own process with its pipes and
  redirections wired in. A single built-in with no pipe runs in the shell
  process itself, so `cd` and `export` change the shell's own state. The
  status of the last stage becomes the shell's status.
- **Line reading**: `LineReader` and `get_next_line` read a file
  descriptor one line at a time, keeping unread data between calls.

## Modules

| Module | What it holds |
| --- | --- |
| `minishell.state` | `ShellState` (environment, exit status, command table, open descriptors), `ShellExit`, signal handlers, `get_signal_status` / `set_signal_status` |
| `minishell.environment` | `from_environ`, `export_variables`, `unset_variables`, `print_env`, `declarations`, `find_variable`, `strip_quotes` and the identifier checks |
| `minishell.expansion` | `lookup` and `expand` |
| `minishell.builtins` | `change_directory`, `print_pwd`, `current_directory`, `echo`, `exit_shell`, `is_builtin`, `run_builtin` |
| `minishell.pathsearch` | `find_path`, `build_full`, `resolve_command`, `is_directory` and failure reporting |
| `minishell.tokens` | `TokenType`, `Token`, `build_command_table` and command-table helpers |
| `minishell.redirections` | `open_input`, `open_output`, `open_append`, `read_heredoc`, `apply_redirection`, `restore_standard_streams` |
| `minishell.linereader` | `LineReader` and `get_next_line` |
| `minishell.executor` | `execute`, `run_single_builtin`, `count_blocks`, `is_only_redirection` |

## A short tour

```python
import os

from minishell.environment import (
    find_variable,
    from_environ,
    is_valid_export_identifier,
    strip_quotes,
)
from minishell.executor import execute
from minishell.linereader import get_next_line
from minishell.state import ShellState
from minishell.tokens import Token, TokenType, build_command_table

env = from_environ(os.environ)          # a list of "NAME=value" entries
print(is_valid_export_identifier("GREETING=hello"))   # True
print(is_valid_export_identifier("1abc=x"))           # False
print(strip_quotes('"hello"'))                        # hello
print(find_variable(env, "PATH") is not None)         # True when PATH is set

# ls | wc -l
state = ShellState(env=env)
state.table = build_command_table([
    Token("ls"),
    Token("|", TokenType.PIPE),
    Token("wc"),
    Token("-l"),
])
execute(state)
print(state.exit_status)                # status of the last stage

read_end, write_end = os.pipe()
os.write(write_end, b"first\nsecond\n")
os.close(write_end)
print(get_next_line(read_end))          # "first\n"
print(get_next_line(read_end))          # "second\n"
```

Quoted operators from the token stream (a `>` token of type `SQUOTE` or
`DQUOTE`, for example) stay plain words in the command table: they reach
the command as arguments and are never taken as redirections.

## What it does not do

There is no prompt loop and no command to run: the package does not read
command lines from a terminal, and it has no lexer that turns a line of
text into tokens. A caller supplies `Token` lists, builds the table with
`build_command_table`, and hands it to `execute`; a `ShellExit` raised by
the `exit` built-in is the caller's to act on.

## Exit statuses

| Situation | Status |
| --- | --- |
| Success | 0 |
| Bad identifier, too many arguments, failed `cd` | 1 |
| `env` given an argument | 2 |
| Redirection target not accessible, command is a directory or cannot be launched | 126 |
| Command or redirection target not found | 127 |
| Stage killed by a signal | 128 + signal number (130 for Ctrl-C, 131 for Ctrl-\\) |