from dataclasses import dataclass


@dataclass
class SanitizerState:
    """Lexical context carried from one chunk to the next.

    Owned by a single cleaner and mutated only while it scans a chunk. Code
    flags take precedence over math flags: while either code flag is set the
    scanner never opens a math context.
    """
    in_code_block: bool = False
    in_inline_code: bool = False
    in_inline_math: bool = False
    in_block_math: bool = False
    at_line_start: bool = True
    # a ** opened bold on the current line and is not closed yet
    bold_open: bool = False
    # last input character scanned by the previous call
    last_char: str = ""

    def in_code(self) -> bool:
        return self.in_code_block or self.in_inline_code

    def in_math(self) -> bool:
        return self.in_inline_math or self.in_block_math

    def is_consistent(self) -> bool:
        if self.in_code_block and self.in_inline_code:
            return False
        if self.in_inline_math and self.in_block_math:
            return False
        return not (self.in_code() and self.in_math())
