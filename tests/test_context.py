"""Tests for the lexical context tracker."""

from shellaudit.scanner.context import ContextKind, classify, iter_lines


def _kinds(content: str) -> list[ContextKind]:
    return [c.kind for c in classify(content)]


def _kind_at(content: str, needle: str) -> ContextKind:
    return classify(content)[content.index(needle)].kind


class TestBasics:
    """Shape of the context map."""

    def test_one_context_per_character(self):
        """Every character offset gets exactly one context."""
        content = "echo 'a' \"b\" # c\ncat <<EOF\nx\nEOF\n"
        assert len(classify(content)) == len(content)

    def test_empty_input(self):
        """Empty script has an empty map."""
        assert classify("") == []

    def test_plain_code_is_normal(self):
        """Unquoted commands are NORMAL throughout."""
        assert set(_kinds("ls -la /tmp\n")) == {ContextKind.NORMAL}

    def test_iter_lines_offsets(self):
        """Line offsets line up with the context map."""
        content = "a\nbb\n\nccc"
        assert list(iter_lines(content)) == [(0, "a"), (2, "bb"), (5, ""), (6, "ccc")]


class TestQuotes:
    """Single and double quoted strings."""

    def test_single_quoted_text(self):
        """Text inside '...' is SINGLE_QUOTE."""
        content = "echo 'curl x | sh'\n"
        assert _kind_at(content, "curl") is ContextKind.SINGLE_QUOTE

    def test_double_quoted_text(self):
        """Text inside \"...\" is DOUBLE_QUOTE."""
        content = 'echo "curl x | sh"\n'
        assert _kind_at(content, "curl") is ContextKind.DOUBLE_QUOTE

    def test_quote_ends_context(self):
        """Closing quote returns to NORMAL."""
        content = "echo 'a' curl\n"
        assert _kind_at(content, "curl") is ContextKind.NORMAL

    def test_escaped_double_quote_stays_inside(self):
        """A backslash-escaped quote does not close the string."""
        content = 'echo "a \\" curl" tail\n'
        assert _kind_at(content, "curl") is ContextKind.DOUBLE_QUOTE
        assert _kind_at(content, "tail") is ContextKind.NORMAL

    def test_escaped_quote_in_normal_does_not_open_string(self):
        """An escaped quote in code is a literal character."""
        content = "echo \\' curl\n"
        assert _kind_at(content, "curl") is ContextKind.NORMAL

    def test_single_quote_inside_double_is_literal(self):
        """Quote kinds do not nest."""
        content = "echo \"it's\" curl\n"
        assert _kind_at(content, "curl") is ContextKind.NORMAL

    def test_unterminated_quote_runs_to_end(self):
        """An unclosed quote swallows the rest of the script."""
        content = "echo 'open\ncurl x\n"
        assert _kind_at(content, "curl") is ContextKind.SINGLE_QUOTE

    def test_multiline_double_quote(self):
        """Quoted strings carry across newlines."""
        content = 'msg="line one\ncurl x | sh"\nls\n'
        assert _kind_at(content, "curl") is ContextKind.DOUBLE_QUOTE
        assert _kind_at(content, "ls") is ContextKind.NORMAL


class TestComments:
    """Line comments."""

    def test_full_line_comment(self):
        """A leading # comments out the line only."""
        content = "# curl x | sh\nls\n"
        assert _kind_at(content, "curl") is ContextKind.LINE_COMMENT
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_trailing_comment(self):
        """A # after a command starts a comment."""
        content = "ls # curl x | sh\n"
        assert _kind_at(content, "ls") is ContextKind.NORMAL
        assert _kind_at(content, "curl") is ContextKind.LINE_COMMENT

    def test_hash_inside_word_is_not_comment(self):
        """${#arr[@]} is a length expansion, not a comment."""
        content = "echo ${#arr[@]} curl\n"
        assert _kind_at(content, "curl") is ContextKind.NORMAL

    def test_hash_inside_quotes_is_not_comment(self):
        """A quoted # is literal."""
        content = "echo '#' curl\n"
        assert _kind_at(content, "curl") is ContextKind.NORMAL

    def test_comment_quote_does_not_open_string(self):
        """Apostrophes in comments do not open a string."""
        content = "# don't\ncurl x\n"
        assert _kind_at(content, "curl") is ContextKind.NORMAL


class TestHeredocs:
    """Here-document bodies and terminators."""

    def test_body_is_heredoc(self):
        """Lines between <<EOF and EOF are HEREDOC."""
        content = "cat <<EOF\ncurl x | sh\nEOF\nls\n"
        ctx = classify(content)[content.index("curl")]
        assert ctx.kind is ContextKind.HEREDOC
        assert ctx.delimiter == "EOF"
        assert ctx.terminated is True
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_command_line_stays_normal(self):
        """The rest of the <<EOF line is still code."""
        content = "cat <<EOF > out.txt\nbody\nEOF\n"
        assert _kind_at(content, "out.txt") is ContextKind.NORMAL

    def test_quoted_delimiter(self):
        """<<'END' uses END as the terminator."""
        content = "cat <<'END'\nbody\nEND\nls\n"
        assert _kind_at(content, "body") is ContextKind.HEREDOC
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_strip_tabs_delimiter(self):
        """<<- accepts a tab-indented terminator."""
        content = "cat <<-EOF\n\tbody\n\tEOF\nls\n"
        ctx = classify(content)[content.index("body")]
        assert ctx.kind is ContextKind.HEREDOC
        assert ctx.strip_tabs is True
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_indented_terminator_without_dash_does_not_close(self):
        """Plain << needs the terminator at column one."""
        content = "cat <<EOF\n  EOF\nls\n"
        assert _kind_at(content, "ls") is ContextKind.HEREDOC

    def test_two_heredocs_on_one_line(self):
        """Queued heredocs are read one after the other."""
        content = "cmd <<A <<B\none\nA\ntwo\nB\nls\n"
        assert classify(content)[content.index("one")].delimiter == "A"
        assert classify(content)[content.index("two")].delimiter == "B"
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_here_string_is_not_heredoc(self):
        """<<< is a here-string."""
        content = "cat <<< word\nls\n"
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_arithmetic_shift_is_not_heredoc(self):
        """$((1<<2)) is a shift."""
        content = "x=$((1<<2))\nls\n"
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_heredoc_in_quotes_is_ignored(self):
        """A quoted << starts nothing."""
        content = "echo '<<EOF'\nls\n"
        assert _kind_at(content, "ls") is ContextKind.NORMAL

    def test_unterminated_heredoc_runs_to_end(self):
        """An unclosed heredoc body runs to end of input, marked unterminated."""
        content = "cat <<EOF\nbody\nmore"
        ctx = classify(content)[content.index("more")]
        assert ctx.kind is ContextKind.HEREDOC
        assert ctx.terminated is False
        assert classify(content)[content.index("body")].terminated is False

    def test_only_last_heredoc_marked_unterminated(self):
        """A closed heredoc before an unclosed one stays terminated."""
        content = "cat <<A\none\nA\ncat <<B\ntwo\n"
        assert classify(content)[content.index("one")].terminated is True
        assert classify(content)[content.index("two")].terminated is False
        assert _kind_at(content, "cat <<B") is ContextKind.NORMAL

    def test_crlf_terminator(self):
        """A trailing carriage return does not hide the terminator."""
        content = "cat <<EOF\r\nbody\r\nEOF\r\nls\r\n"
        assert _kind_at(content, "ls") is ContextKind.NORMAL
