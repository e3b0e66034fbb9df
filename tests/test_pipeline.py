from minishell.pipeline import (
    CommandLine,
    PipeCommand,
    parse_pipes,
    parsing_line,
    split_pipes,
)


def test_split_pipes_keeps_spacing():
    assert split_pipes("ls | wc") == ["ls ", " wc"]


def test_split_pipes_ignores_quoted_pipe():
    assert split_pipes("echo 'a|b' | cat") == ["echo 'a|b' ", " cat"]
    assert split_pipes('echo "x|y"') == ['echo "x|y"']


def test_split_pipes_drops_empty_pieces():
    assert split_pipes("a||b|") == ["a", "b"]
    assert split_pipes("") == []


def test_parse_pipes_builds_commands():
    line = parse_pipes("cat f | grep x | wc")
    assert [c.cmd_pipe for c in line.commands] == ["cat f ", " grep x ", " wc"]
    assert all(c.redirection is None for c in line.commands)
    assert line.cmd_sep == "cat f | grep x | wc"
    assert line.pipe_count() == 2


def test_pipe_count_single_and_empty():
    assert parse_pipes("ls").pipe_count() == 0
    assert CommandLine("").pipe_count() == 0
    assert CommandLine("a|b", [PipeCommand("a"), PipeCommand("b")]).pipe_count() == 1


def test_parsing_line_rejects_invalid_input():
    assert parsing_line("ls; pwd") is None
    assert parsing_line("echo 'open") is None
    assert parsing_line(None) is None


def test_parsing_line_parses_redirections():
    result = parsing_line("cat < in | sort > out")
    assert len(result) == 2
    assert result[0].input_files == ["in"]
    assert result[0].cmd == "cat"
    assert result[1].output_files == ["out"]
    assert result[1].cmd == "sort"


def test_parsing_line_bad_redirection_gives_none_entry():
    result = parsing_line("cat >")
    assert result == [None]