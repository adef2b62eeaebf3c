# =============================================================================
# test_lexer.py - Line Scanner Unit Tests
# =============================================================================
# Tests for the KTC32 assembler line scanner.
#
# Test coverage includes:
#   - Line classification: instruction, label, constant
#   - Comment and blank line handling
#   - Comma/whitespace equivalence and case folding
#   - Column and line number tracking
#   - Unknown mnemonic errors
# =============================================================================

import pytest
from ktc32_sdk.assembler.lexer import Lexer, LineKind, scan_line, split_tokens, is_comment
from ktc32_sdk.errors import AssemblySyntaxError


# =============================================================================
# Helper Function
# =============================================================================

def scan(source: str) -> list:
    """Scan a whole source string into a list of TokenLines."""
    return list(Lexer(source, "<test>").tokenize())


# =============================================================================
# Line Classification Tests
# =============================================================================

class TestLineClassification:
    """Test that lines are sorted into the right kind."""

    def test_instruction_line(self):
        line = scan_line("add r1, r2", 1)
        assert line.kind == LineKind.INSTRUCTION
        assert line.tokens == ("add", "r1", "r2")

    def test_label_line(self):
        line = scan_line("loop:", 1)
        assert line.kind == LineKind.LABEL
        assert line.tokens == ("loop:",)

    def test_indented_label(self):
        """Leading whitespace does not change a label."""
        line = scan_line("    loop:", 1)
        assert line.kind == LineKind.LABEL

    def test_constant_line(self):
        line = scan_line("0xDEADBEEF", 1)
        assert line.kind == LineKind.CONSTANT
        assert line.tokens == ("0xdeadbeef",)

    def test_three_token_lui(self):
        line = scan_line("lui r1, 0x1234", 1)
        assert line.kind == LineKind.INSTRUCTION
        assert line.tokens == ("lui", "r1", "0x1234")

    def test_unknown_mnemonic(self):
        """A line starting with an unknown word is a syntax error."""
        with pytest.raises(AssemblySyntaxError) as exc_info:
            scan_line("foo r1, r2", 4, "prog.asm")
        assert "unknown mnemonic 'foo'" in str(exc_info.value)
        assert exc_info.value.line == 4
        assert exc_info.value.tokens == ("foo", "r1", "r2")

    def test_label_followed_by_instruction(self):
        """Labels must stand alone on their line."""
        with pytest.raises(AssemblySyntaxError):
            scan_line("loop: mov r1, r2", 1)

    def test_constant_with_extra_tokens(self):
        """A hex token followed by more tokens is not a constant."""
        with pytest.raises(AssemblySyntaxError):
            scan_line("0x10 0x20", 1)


# =============================================================================
# Comment and Whitespace Tests
# =============================================================================

class TestComments:
    """Test comment and blank line handling."""

    def test_empty_line(self):
        assert scan_line("", 1) is None

    def test_whitespace_only(self):
        assert scan_line("   \t   ", 1) is None

    def test_comment_line(self):
        assert scan_line("// a comment", 1) is None

    def test_indented_comment(self):
        assert scan_line("      // indented comment", 1) is None

    def test_is_comment(self):
        assert is_comment("//")
        assert is_comment("  ")
        assert not is_comment("mov r1, r2")

    def test_comments_produce_no_lines(self):
        lines = scan("// header\n\n   // indented\nmov r1, r2\n")
        assert len(lines) == 1
        assert lines[0].tokens == ("mov", "r1", "r2")


# =============================================================================
# Tokenization Tests
# =============================================================================

class TestTokenization:
    """Test token splitting."""

    def test_commas_equal_whitespace(self):
        assert scan_line("add r1, r2", 1).tokens == scan_line("add r1 r2", 1).tokens

    def test_commas_without_spaces(self):
        assert scan_line("addi r1,r1,1", 1).tokens == ("addi", "r1", "r1", "1")

    def test_case_folding(self):
        """Mnemonics, registers and hex digits are lowercased."""
        line = scan_line("ADDI R1, Sp, 0xABCD", 1)
        assert line.tokens == ("addi", "r1", "sp", "0xabcd")

    def test_label_is_lowercased(self):
        assert scan_line("Loop:", 1).tokens == ("loop:",)

    def test_columns(self):
        """Columns are 1-based offsets into the raw line."""
        pairs = split_tokens("  addi r1,r1,1")
        assert pairs == [("addi", 3), ("r1", 8), ("r1", 11), ("1", 14)]

    def test_original_text_kept(self):
        line = scan_line("  MOV r1, r2  ", 1)
        assert line.text == "  MOV r1, r2  "


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositionTracking:
    """Test line numbers and source locations."""

    def test_line_numbers_count_skipped_lines(self):
        lines = scan("// comment\n\nloop:\n    jal r0, loop\n")
        assert [line.line for line in lines] == [3, 4]

    def test_form_feed_is_not_a_line_break(self):
        """Only LF ends a line; form feed is whitespace."""
        lines = scan("mov r1, r2\x0cmov r1, r2\n")
        assert len(lines) == 1
        assert lines[0].tokens == ("mov", "r1", "r2", "mov", "r1", "r2")

    def test_other_unicode_breaks_stay_on_one_line(self):
        lines = scan("mov r1, r2\u2028mov r1, r2\x1cmov r1, r2\n")
        assert [line.line for line in lines] == [1]

    def test_crlf_line_endings(self):
        lines = scan("loop:\r\n    jal r0, loop\r\n")
        assert [line.line for line in lines] == [1, 2]
        assert lines[1].tokens == ("jal", "r0", "loop")
        assert lines[1].text == "    jal r0, loop"

    def test_location_points_at_token(self):
        line = scan_line("mov r1, r32", 7, "prog.asm")
        location = line.location(2)
        assert location.filename == "prog.asm"
        assert location.line == 7
        assert location.column == 9

    def test_filename_in_lexer_output(self):
        lines = list(Lexer("mov r1, r2", "boot.asm").tokenize())
        assert lines[0].filename == "boot.asm"

    def test_error_stops_iteration(self):
        """The scanner raises at the first bad line."""
        lexer = Lexer("mov r1, r2\nbogus\nalso bogus\n")
        with pytest.raises(AssemblySyntaxError) as exc_info:
            list(lexer.tokenize())
        assert exc_info.value.line == 2
