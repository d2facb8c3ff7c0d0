import pytest

from minishell.tokens import (
    Token,
    TokenType,
    build_command_table,
    has_later_input,
    has_later_output,
    is_redirection,
    restore_quoted_operators,
)


def test_token_type_values_follow_lexer_order():
    tokens = [
        Token("a", TokenType(0)),
        Token("|", TokenType(1)),
        Token("<<", TokenType(7)),
        Token("EOF", TokenType(0)),
    ]
    assert build_command_table(tokens) == [["a"], ["|"], ["<<", "EOF"]]


def test_simple_command():
    tokens = [Token("ls"), Token("-l")]
    assert build_command_table(tokens) == [["ls", "-l"]]


def test_redirections_come_before_command():
    tokens = [
        Token("cat"),
        Token("<", TokenType.REDIR_IN),
        Token("in.txt"),
        Token("-e"),
        Token(">>", TokenType.REDIR_APPEND),
        Token("out.txt"),
    ]
    assert build_command_table(tokens) == [
        ["<", "in.txt"],
        [">>", "out.txt"],
        ["cat", "-e"],
    ]


def test_pipeline_entries():
    tokens = [
        Token("echo"),
        Token("hi"),
        Token("|", TokenType.PIPE),
        Token("wc"),
        Token(">", TokenType.REDIR_OUT),
        Token("f"),
    ]
    assert build_command_table(tokens) == [
        ["echo", "hi"],
        ["|"],
        [">", "f"],
        ["wc"],
    ]


def test_stage_with_only_redirection_has_no_argv():
    tokens = [Token("<<", TokenType.HEREDOC), Token("EOF")]
    assert build_command_table(tokens) == [["<<", "EOF"]]


def test_quoted_operator_is_marked_then_restored():
    tokens = [Token("echo"), Token(">", TokenType.SQUOTE), Token("<<", TokenType.DQUOTE)]
    table = build_command_table(tokens)
    assert table == [["echo", ";>", ";<<"]]
    restore_quoted_operators(table)
    assert table == [["echo", ">", "<<"]]


def test_unquoted_word_operator_text_is_not_marked():
    table = build_command_table([Token("echo"), Token(">", TokenType.WORD)])
    assert table == [["echo", ">"]]


def test_missing_redirection_target_raises():
    with pytest.raises(ValueError):
        build_command_table([Token("ls"), Token(">", TokenType.REDIR_OUT)])


def test_empty_tokens_give_empty_table():
    assert build_command_table([]) == []


@pytest.mark.parametrize(
    "entry, expected",
    [
        (["<", "f"], True),
        ([">", "f"], True),
        ([">>", "f"], True),
        (["<<", "EOF"], True),
        (["ls"], False),
        (["|"], False),
        ([], False),
        (None, False),
    ],
)
def test_is_redirection(entry, expected):
    assert is_redirection(entry) is expected


def test_later_input_and_output_stop_at_pipe():
    table = [["<", "a"], ["<<", "b"], [">", "c"], ["cat"], ["|"], [">>", "d"]]
    assert has_later_input(table, 0) is True
    assert has_later_input(table, 1) is False
    assert has_later_output(table, 0) is True
    assert has_later_output(table, 2) is False
    assert has_later_output(table, 3) is False


def test_restore_leaves_other_words():
    table = [["echo", ";x", "plain"], ["|"]]
    restore_quoted_operators(table)
    assert table == [["echo", ";x", "plain"], ["|"]]