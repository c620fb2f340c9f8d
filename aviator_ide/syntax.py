"""
AviatorScript IDE Syntax Module

Declarative tokenizer rules for AviatorScript coloring.
Rules are tried in order at each position; the first match wins and
its text is consumed before moving on.
"""

from typing import Any, Dict, List, Pattern, Tuple
from dataclasses import dataclass
from enum import Enum
import re


LANGUAGE_ID = "aviator"


class TokenType(str, Enum):
    """Token categories understood by the editor theme"""
    COMMENT = "comment"
    STRING = "string"
    KEYWORD = "keyword"
    PREDEFINED = "predefined"
    NUMBER = "number"
    TEXT = ""


KEYWORDS = (
    "let", "if", "else", "for", "while", "fn", "return",
    "break", "continue", "true", "false", "nil",
)

PREDEFINED = (
    "println", "print", "p", "count", "is_def", "type",
    "long", "double", "str", "boolean", "range", "tuple",
)


# Ordered (pattern, category) table
AVIATOR_GRAMMAR: List[Tuple[str, TokenType]] = [
    (r'#.*', TokenType.COMMENT),
    (r'"(?:[^"\\]|\\.)*"', TokenType.STRING),
    (r"'(?:[^'\\]|\\.)*'", TokenType.STRING),
    (r'\b(?:' + '|'.join(KEYWORDS) + r')\b', TokenType.KEYWORD),
    (r'\b(?:' + '|'.join(PREDEFINED) + r')\b', TokenType.PREDEFINED),
    (r'[0-9]+', TokenType.NUMBER),
]


@dataclass
class Token:
    """A colored span of one source line"""
    text: str
    token_type: TokenType
    start: int
    end: int
    line: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "type": self.token_type.value,
            "start": self.start,
            "end": self.end,
            "line": self.line,
        }


class AviatorTokenizer:
    """Applies the grammar table to source text"""

    def __init__(self, rules: List[Tuple[str, TokenType]] = None):
        self.rules: List[Tuple[Pattern, TokenType]] = [
            (re.compile(pattern), token_type)
            for pattern, token_type in (rules or AVIATOR_GRAMMAR)
        ]

    def tokenize(self, text: str, line_num: int = 0) -> List[Token]:
        """Tokenize a single line"""
        tokens: List[Token] = []
        pos = 0

        while pos < len(text):
            for pattern, token_type in self.rules:
                match = pattern.match(text, pos)
                if match and match.end() > pos:
                    tokens.append(Token(match.group(), token_type, pos, match.end(), line_num))
                    pos = match.end()
                    break
            else:
                # Unmatched characters merge into one plain span
                if tokens and tokens[-1].token_type == TokenType.TEXT and tokens[-1].end == pos:
                    last = tokens[-1]
                    tokens[-1] = Token(last.text + text[pos], TokenType.TEXT, last.start, pos + 1, line_num)
                else:
                    tokens.append(Token(text[pos], TokenType.TEXT, pos, pos + 1, line_num))
                pos += 1

        return tokens

    def tokenize_code(self, code: str) -> List[List[Token]]:
        """Tokenize a full document, line by line"""
        return [self.tokenize(line, i + 1) for i, line in enumerate(code.split('\n'))]


def monarch(rules: List[Tuple[str, TokenType]] = None) -> Dict[str, Any]:
    """Grammar in the shape setMonarchTokensProvider takes (patterns as strings)"""
    return {
        "tokenizer": {
            "root": [[pattern, token_type.value] for pattern, token_type in (rules or AVIATOR_GRAMMAR)],
        }
    }
