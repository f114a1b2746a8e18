"""
Unit tests for the code sink.
"""

from stache.compiler.sink import CodeSink


class TestWriting:
    """Tests for lines and statement joining."""

    def test_statements_on_one_line(self, sink):
        """Verify statements written without println share a line."""
        sink.write("a()")
        sink.write("b()")

        assert sink.getvalue() == "    a(); b()\n"

    def test_println_starts_new_line(self, sink):
        """Verify println ends the current line."""
        sink.write("a()")
        sink.println()
        sink.write("b()")

        assert sink.getvalue() == "    a()\n    b()\n"

    def test_custom_indent_and_level(self):
        """Verify indentation unit and base level are honoured."""
        sink = CodeSink(indent="  ", level=2)
        sink.write("x()")

        assert sink.getvalue() == "    x()\n"


class TestBlocks:
    """Tests for indented blocks."""

    def test_block_indents_body(self, sink):
        """Verify the block body is indented and the trailer dedented."""
        sink.write("before()")
        sink.begin_block("if x:")
        sink.write("body()")
        sink.end_block("# /x")

        assert sink.getvalue() == "    before()\n    if x:\n        body()\n    # /x\n"

    def test_empty_block_gets_pass(self, sink):
        """Verify a block with no statements is still valid Python."""
        sink.begin_block("for item1 in data.items:")
        sink.end_block()

        assert sink.getvalue() == "    for item1 in data.items:\n        pass\n"

    def test_nested_block_counts_as_statement(self, sink):
        """Verify an outer block holding only a block gets no pass."""
        sink.begin_block("if a:")
        sink.begin_block("if b:")
        sink.end_block()
        sink.end_block()

        assert sink.getvalue() == "    if a:\n        if b:\n            pass\n"


class TestSuppression:
    """Tests for switching output off and on."""

    def test_suppressed_writes_are_dropped(self, sink):
        """Verify nothing is recorded while suppressed."""
        sink.disable_output()
        sink.write("dropped()")
        sink.println()
        sink.enable_output()
        sink.write("kept()")

        assert sink.is_suppressing() is False
        assert sink.getvalue() == "    kept()\n"

    def test_suppressed_blocks_keep_levels_balanced(self, sink):
        """Verify blocks opened and closed while suppressed leave no trace."""
        sink.disable_output()
        sink.begin_block("if x:")
        sink.write("dropped()")
        sink.end_block("# /x")
        sink.enable_output()
        sink.write("kept()")

        assert sink.getvalue() == "    kept()\n"

    def test_finish_ends_line_while_suppressed(self, sink):
        """Verify finish always terminates the last line."""
        sink.disable_output()
        sink.finish()

        assert sink.getvalue() == "\n"

    def test_rollback_restores_mark(self, sink):
        """Verify rollback discards lines, open blocks and the open line."""
        sink.write("a()")
        mark = sink.mark()
        sink.begin_block("if x:")
        sink.write("b()")
        sink.disable_output()

        sink.rollback(mark)

        assert sink.is_suppressing() is False
        sink.write("c()")
        assert sink.getvalue() == "    a(); c()\n"

    def test_drain_resets(self, sink):
        """Verify drain returns the text and starts over at the base level."""
        sink.begin_block("if x:")
        sink.write("a()")

        assert sink.drain() == "    if x:\n        a()\n"
        sink.write("b()")
        assert sink.getvalue() == "    b()\n"
