from bill_import.tokenizer import split_line, split_lines


def test_split_plain_fields_are_trimmed():
    assert split_line(" a , b ,c\t") == ["a", "b", "c"]


def test_quoted_delimiter_is_kept_and_quotes_dropped():
    assert split_line('x,"y,z",w') == ["x", "y,z", "w"]


def test_empty_fields_are_preserved():
    assert split_line("a,,b,") == ["a", "", "b", ""]


def test_unbalanced_quote_swallows_rest_of_line():
    # Never raises; the open quote simply keeps the delimiter literal.
    assert split_line('a,"b,c') == ["a", "b,c"]


def test_doubled_quotes_toggle_twice():
    assert split_line('"say ""hi""",x') == ["say hi", "x"]


def test_custom_delimiter():
    assert split_line("a\tb\t c", delimiter="\t") == ["a", "b", "c"]


def test_split_lines_drops_blank_lines_and_handles_crlf():
    text = "header,1\r\n\r\n  \r\nrow,2\r\n"
    assert split_lines(text) == ["header,1", "row,2"]


def test_split_lines_empty_text():
    assert split_lines("") == []
    assert split_lines("\n \n\t\n") == []
