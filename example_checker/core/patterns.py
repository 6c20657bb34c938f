"""
Regular expressions for directive, flag and inline-span recognition.
"""

import re


# =begin NAME :flags / =end NAME / =for NAME :flags
BLOCK_DIRECTIVE = re.compile(r'^(?P<indent>[ \t]*)=(?P<verb>begin|end|for)\s+(?P<name>[\w-]+)(?P<config>.*)$')

# Abbreviated code block: =code :flags
ABBREVIATED_CODE = re.compile(r'^[ \t]*=code\b(?P<config>.*)$')

# =head1 Text, =head2 Text ...
HEADING = re.compile(r'^[ \t]*=head(?P<level>\d+)\b[ \t]*(?P<text>.*)$')

# =TITLE Text
TITLE = re.compile(r'^[ \t]*=TITLE\b[ \t]*(?P<text>.*)$')

# Any line that starts a new Pod block; ends paragraph code blocks
ANY_DIRECTIVE = re.compile(r'^[ \t]*=[A-Za-z]')

# :name, :!name, :name<value>, :name("value"), :name[value], :name{value}, :name«value»
FLAG = re.compile(
    r':(?P<neg>!)?(?P<name>[\w-]+)'
    r'(?:<(?P<angle>[^>]*)>'
    r'|\((?P<paren>[^)]*)\)'
    r'|\[(?P<bracket>[^\]]*)\]'
    r'|\{(?P<brace>[^}]*)\}'
    r'|«(?P<guillemet>[^»]*)»)?'
)

# Inline code formatting code: C<...>, C<<...>>, C«...»
INLINE_CODE_OPEN = re.compile(r'(?<![A-Za-z0-9_])(?P<marker>C)(?P<open><+|«)')

# Opening -> closing bracket for inline spans
INLINE_BRACKETS: dict[str, str] = {
    "<": ">",
    "«": "»",
}

# Line terminators, as markdown-it normalises them
LINE_BREAK = re.compile(r'\r\n?|\n')

# Markdown fences
FENCE = re.compile(r'^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$')

# Markdown inline code
BACKTICK_SPAN = re.compile(r'(?P<ticks>`+)(?P<text>.+?)(?P=ticks)')


def strip_quotes(value: str) -> str:
    """Remove one level of surrounding quotes from a flag value."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value
