# minishell

A small interactive POSIX-style shell. It reads command lines at a
`minishell$ ` prompt and runs them. It supports:

- pipelines joined with `|`
- input (`<`), output (`>`), append (`>>`) redirections and heredocs (`<<`)
- single and double quotes
- `$NAME` and `$?` expansion, except inside single quotes
- the builtins `echo` (with `-n`), `cd` (with `-` and `~`), `pwd`,
  `export`, `unset`, `env` and `exit`

Programs other than the builtins are looked up in the directories of `PATH`,
or run directly when their name starts with `/`, `.` or `~`.

Lines that contain `;` or `\` outside quotes, or that leave a quote open,
are rejected with `Error: Invalid input`.

## Installation

```
pip install .
```

## Usage

Start the shell:

```
minishell
```

Then type commands as in any shell:

```
minishell$ echo hello | tr a-z A-Z > out.txt
minishell$ cat << EOF
heredoc> home is $HOME
heredoc> EOF
minishell$ export GREETING=hi
minishell$ echo $GREETING $?
minishell$ exit 3
```

Heredoc lines are expanded unless the delimiter is quoted (`<< 'EOF'`).
When a command has several heredocs, all are read but only the last one is
fed to the command.

Press Ctrl-D at the prompt to leave the shell. The shell then exits with the
status of the last command it ran.

On startup the shell adds `MINISHELL=1` to its environment and sets `SHLVL`
to 1; if `MINISHELL` is already set (the shell was started from itself),
`SHLVL` is incremented instead. Programs it runs receive this environment.

## What it does not do

There is no `;`, `&&` or `||`, no background jobs or job control, no
wildcard expansion and no subshells or command substitution. Words are
separated by spaces only.

## Using the parser from Python

The parsing pieces can be used on their own:

```python
from minishell.lexer import parse_command_args
from minishell.redirections import parse_redir
from minishell.pipeline import parse_pipes

args = parse_command_args('echo "hello world" foo')
args.argv            # ['echo', 'hello world', 'foo']

parsed = parse_redir("sort < in.txt > out.txt")
parsed.cmd           # 'sort'
parsed.input_files   # ['in.txt']
parsed.output_files  # ['out.txt']

line = parse_pipes("ls -l | grep py | wc -l")
line.pipe_count()    # 2
```

`parse_redir` returns `None` when the redirection syntax is invalid, and
`parse_command_args` returns `None` for a string with no words.

## Running the tests

```
pip install ".[test]"
pytest
```