from minishell.environment import ShellState
from minishell.expansion import (
    expand_str,
    get_env_paths,
    get_var_value,
    handle_variable,
)


def make_state(exit_code=0):
    return ShellState(env=["HOME=/home/user", "USER=alice", "EMPTY="], exit_code=exit_code)


def test_get_var_value():
    state = make_state()
    assert get_var_value("HOME", state.env) == "/home/user"
    assert get_var_value("MISSING", state.env) == ""
    assert get_var_value("EMPTY", state.env) == ""
    assert get_var_value(None, state.env) == ""


def test_handle_variable_name():
    text = "USER rest"
    value, end = handle_variable(text, 0, make_state())
    assert value == "alice"
    assert text[end:] == " rest"


def test_handle_variable_exit_code():
    value, end = handle_variable("?x", 0, make_state(exit_code=7))
    assert value == "7"
    assert end == 1


def test_expand_simple_variable():
    assert expand_str("$HOME", make_state()) == "/home/user"
    assert expand_str("hi $USER!", make_state()) == "hi alice!"


def test_expand_exit_code():
    assert expand_str("$?", make_state(exit_code=42)) == "42"


def test_single_quotes_block_expansion():
    assert expand_str("'$HOME'", make_state()) == "'$HOME'"


def test_double_quotes_allow_expansion():
    assert expand_str('"$USER"', make_state()) == '"alice"'


def test_dollar_not_followed_by_name():
    state = make_state()
    assert expand_str("$", state) == "$"
    assert expand_str("$1", state) == "$1"
    assert expand_str("a $ b", state) == "a $ b"


def test_unknown_variable_vanishes():
    assert expand_str("x$NOPE-y", make_state()) == "x-y"


def test_expand_none_gives_empty():
    assert expand_str(None, make_state()) == ""
    assert expand_str("abc", None) == ""


def test_text_without_dollar_is_unchanged():
    text = "ls -la /tmp"
    assert expand_str(text, make_state()) == text


def test_get_env_paths():
    env = ["HOME=/root", "PATH=/bin:/usr/bin"]
    assert get_env_paths(env, "PATH") == ["/bin", "/usr/bin"]


def test_get_env_paths_drops_empty_fields():
    assert get_env_paths(["PATH=/bin::/usr/bin:"], "PATH") == ["/bin", "/usr/bin"]


def test_get_env_paths_missing():
    assert get_env_paths(["HOME=/root"], "PATH") is None