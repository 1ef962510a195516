"""
Statement router for filang.

Classifies a line by its verb once, then parses only that statement's
clauses into a Statement variant.

Grammar (keywords are case-insensitive, clauses appear in this order):
    SELECT FILES|FOLDERS [FROM "<dir>"] [WHERE <predicate>]
                         [ORDER BY <field> [ASC|DESC]] [INTO "<file>"]
    DELETE FILES|FOLDERS [FROM "<dir>"] [WHERE <predicate>]
    MOVE|COPY FILES|FOLDERS [FROM "<dir>"] [WHERE <predicate>] TO "<dir>"
    MOVE|COPY FILE|FOLDER "<name>|*" TO "<dir>"
    CREATE FILE|FOLDER "<name>"      DELETE FILE|FOLDER "<name>|*"
    READ FILE "<name>|*"             EDIT FILE "<name>"  (alias: FMLE)
    WRITE FILE "<name>" TO "<text>"  UPDATE FILE "<name>" ADD "<text>"
    RENAME FILE|FOLDER "<old>" TO "<new>"
    MERGE "<f1>" "<f2>" ... TO "<dest>"
    CHMOD "<name>" TO "<octal mode>"
    USE "<dir>"   DROP   LOAD "<script>.fql"
    LIST FILES|FOLDERS|*   COUNT FILES|FOLDERS|ALL

A line that fits no shape parses to ``Unknown`` carrying the reason and,
when one is close enough, a suggested command.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from ..domain import statement as st
from ..domain.entity import EntityKind
from ..exit_codes import DslSyntaxError
from ..utils import closest_match
from .lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

# Command phrases, used for completion and "did you mean" hints
COMMANDS = [
    'LOAD', 'CREATE FILE', 'CREATE FOLDER', 'READ FILE', 'WRITE FILE',
    'UPDATE FILE', 'EDIT FILE', 'DELETE FILE', 'DELETE FILES',
    'DELETE FOLDER', 'DELETE FOLDERS', 'USE', 'DROP',
    'LIST FILES', 'LIST FOLDERS', 'LIST *',
    'MOVE FILE', 'MOVE FILES', 'MOVE FOLDER', 'MOVE FOLDERS',
    'COPY FILE', 'COPY FILES', 'COPY FOLDER', 'COPY FOLDERS',
    'RENAME FILE', 'RENAME FOLDER', 'COUNT FILES', 'COUNT FOLDERS', 'COUNT ALL',
    'SELECT FILES', 'SELECT FOLDERS', 'MERGE', 'CHMOD',
]

_OCTAL_MODE_RE = re.compile(r'^0?[0-7]{3}$')


class _Cursor:
    """Walks the token list of one line."""

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def accept(self, *keywords: str) -> Optional[str]:
        """Consume the next token if it is one of ``keywords``; return it upper-cased."""
        token = self.peek()
        if token is not None and token.is_word(*keywords):
            self.pos += 1
            return token.value.upper()
        return None

    def expect(self, *keywords: str) -> str:
        found = self.accept(*keywords)
        if found is None:
            token = self.peek()
            got = f"'{token.value}'" if token else "end of line"
            raise DslSyntaxError(f"Expected {' or '.join(keywords)}, got {got}")
        return found

    def expect_string(self, what: str, allow_wildcard: bool = False) -> str:
        token = self.peek()
        if token is None or token.kind is not TokenKind.STRING:
            got = f"'{token.value}'" if token else "end of line"
            raise DslSyntaxError(f"Expected quoted {what}, got {got}")
        self.pos += 1
        if token.value == st.WILDCARD and not allow_wildcard:
            raise DslSyntaxError(f'Wildcard "*" is not allowed for {what}')
        if not token.value and what != 'text':
            raise DslSyntaxError(f"Empty {what}")
        return token.value

    def expect_end(self) -> None:
        if not self.at_end():
            token = self.advance()
            raise DslSyntaxError(f"Unexpected '{token.value}' at column {token.start + 1}")

    def where_text(self, terminators: Tuple[str, ...]) -> str:
        """
        Consume the raw predicate text after WHERE.

        The predicate ends at the first top-level terminator keyword
        (a ``TO`` only counts when a quoted string follows it).
        """
        depth = 0
        first: Optional[Token] = None
        last: Optional[Token] = None

        while not self.at_end():
            token = self.peek()
            if token.kind is TokenKind.LPAREN:
                depth += 1
            elif token.kind is TokenKind.RPAREN:
                depth = max(depth - 1, 0)
            elif depth == 0 and token.is_word(*terminators):
                following = self.peek(1)
                if not token.is_word('TO') or (following and following.kind is TokenKind.STRING):
                    break
            first = first or token
            last = token
            self.pos += 1

        if first is None or last is None:
            raise DslSyntaxError("WHERE requires a condition")
        return self.text[first.start:last.end].strip()


class StatementRouter:
    """
    Parses DSL lines into Statement variants.

    Example:
        router = StatementRouter()
        stmt = router.parse('SELECT FILES WHERE size > 10 ORDER BY size DESC')
        # SelectFiles(from_path=None, where='size > 10',
        #             order_by=SortSpec('size', SortDirection.DESC), into=None)
    """

    def __init__(self):
        self._verbs: Dict[str, Callable[[_Cursor], st.Statement]] = {
            'LOAD': self._parse_load,
            'CREATE': self._parse_create,
            'READ': self._parse_read,
            'EDIT': self._parse_edit,
            'FMLE': self._parse_edit,
            'WRITE': self._parse_write,
            'UPDATE': self._parse_update,
            'DELETE': self._parse_delete,
            'USE': self._parse_use,
            'DROP': lambda cursor: st.Drop(),
            'LIST': self._parse_list,
            'MOVE': self._parse_transfer,
            'COPY': self._parse_transfer,
            'RENAME': self._parse_rename,
            'COUNT': self._parse_count,
            'SELECT': self._parse_select,
            'MERGE': self._parse_merge,
            'CHMOD': self._parse_chmod,
        }

    def parse(self, line: str) -> st.Statement:
        """Parse one trimmed line. Never raises; bad lines become ``Unknown``."""
        text = line.strip()
        try:
            tokens = tokenize(text)
            if not tokens or tokens[0].kind is not TokenKind.WORD:
                raise DslSyntaxError("Statement must start with a command")
            cursor = _Cursor(text, tokens)
            verb = cursor.advance().value.upper()
            parse_verb = self._verbs.get(verb)
            if parse_verb is None:
                raise DslSyntaxError(f"Unknown command: {verb}")
            statement = parse_verb(cursor)
            cursor.expect_end()
        except DslSyntaxError as e:
            logger.debug(f"Syntax error in '{text}': {e}")
            return st.Unknown(text, str(e), e.suggestion or self.suggest(text))
        return statement

    def suggest(self, text: str) -> Optional[str]:
        """Closest known command phrase to the first words of ``text``."""
        words = text.split()
        if not words:
            return None
        phrase = ' '.join(words[:2]).upper()
        if phrase in COMMANDS or words[0].upper() in COMMANDS:
            return None
        return closest_match(phrase, COMMANDS) or closest_match(words[0], COMMANDS)

    # Verb parsers

    def _parse_load(self, cursor: _Cursor) -> st.Statement:
        path = cursor.expect_string("script path")
        if not path.lower().endswith('.fql'):
            raise DslSyntaxError("LOAD expects a .fql script")
        return st.Load(path)

    def _parse_create(self, cursor: _Cursor) -> st.Statement:
        obj = cursor.expect('FILE', 'FOLDER')
        name = cursor.expect_string(f"{obj.lower()} name")
        return st.CreateFile(name) if obj == 'FILE' else st.CreateFolder(name)

    def _parse_read(self, cursor: _Cursor) -> st.Statement:
        cursor.expect('FILE')
        return st.ReadFile(cursor.expect_string("file name", allow_wildcard=True))

    def _parse_edit(self, cursor: _Cursor) -> st.Statement:
        cursor.expect('FILE')
        return st.EditFile(cursor.expect_string("file name"))

    def _parse_write(self, cursor: _Cursor) -> st.Statement:
        cursor.expect('FILE')
        name = cursor.expect_string("file name")
        cursor.expect('TO')
        return st.WriteFile(name, cursor.expect_string("text"))

    def _parse_update(self, cursor: _Cursor) -> st.Statement:
        cursor.expect('FILE')
        name = cursor.expect_string("file name")
        cursor.expect('ADD')
        return st.AppendFile(name, cursor.expect_string("text"))

    def _parse_delete(self, cursor: _Cursor) -> st.Statement:
        obj = cursor.expect('FILE', 'FOLDER', 'FILES', 'FOLDERS')
        if obj == 'FILE':
            return st.DeleteFile(cursor.expect_string("file name", allow_wildcard=True))
        if obj == 'FOLDER':
            return st.DeleteFolder(cursor.expect_string("folder name", allow_wildcard=True))

        from_path, where = self._parse_source(cursor, terminators=())
        cls = st.DeleteFiles if obj == 'FILES' else st.DeleteFolders
        return cls(from_path=from_path, where=where)

    def _parse_use(self, cursor: _Cursor) -> st.Statement:
        return st.Use(cursor.expect_string("folder name"))

    def _parse_list(self, cursor: _Cursor) -> st.Statement:
        obj = cursor.expect('FILE', 'FILES', 'FOLDER', 'FOLDERS', '*', 'ALL')
        if obj in ('FILE', 'FILES'):
            return st.ListFiles()
        if obj in ('FOLDER', 'FOLDERS'):
            return st.ListFolders()
        return st.ListAll()

    def _parse_transfer(self, cursor: _Cursor) -> st.Statement:
        verb = cursor.tokens[0].value.upper()
        obj = cursor.expect('FILE', 'FOLDER', 'FILES', 'FOLDERS')

        if obj in ('FILE', 'FOLDER'):
            name = cursor.expect_string(f"{obj.lower()} name", allow_wildcard=True)
            cursor.expect('TO')
            target = cursor.expect_string("target folder")
            single = {
                ('MOVE', 'FILE'): st.MoveFile,
                ('MOVE', 'FOLDER'): st.MoveFolder,
                ('COPY', 'FILE'): st.CopyFile,
                ('COPY', 'FOLDER'): st.CopyFolder,
            }[(verb, obj)]
            return single(name, target)

        from_path, where = self._parse_source(cursor, terminators=('TO',))
        cursor.expect('TO')
        target = cursor.expect_string("target folder")
        batch = {
            ('MOVE', 'FILES'): st.MoveFiles,
            ('MOVE', 'FOLDERS'): st.MoveFolders,
            ('COPY', 'FILES'): st.CopyFiles,
            ('COPY', 'FOLDERS'): st.CopyFolders,
        }[(verb, obj)]
        return batch(target=target, from_path=from_path, where=where)

    def _parse_rename(self, cursor: _Cursor) -> st.Statement:
        obj = cursor.expect('FILE', 'FOLDER')
        old_name = cursor.expect_string(f"{obj.lower()} name")
        cursor.expect('TO')
        new_name = cursor.expect_string("new name")
        entity = EntityKind.FILE if obj == 'FILE' else EntityKind.FOLDER
        return st.Rename(entity, old_name, new_name)

    def _parse_count(self, cursor: _Cursor) -> st.Statement:
        obj = cursor.expect('FILES', 'FILE', 'FOLDERS', 'FOLDER', 'ALL', '*')
        if obj in ('FILES', 'FILE'):
            return st.CountFiles()
        if obj in ('FOLDERS', 'FOLDER'):
            return st.CountFolders()
        return st.CountAll()

    def _parse_select(self, cursor: _Cursor) -> st.Statement:
        obj = cursor.expect('FILES', 'FOLDERS')
        from_path, where = self._parse_source(cursor, terminators=('ORDER', 'INTO'))

        order_by = None
        if cursor.accept('ORDER'):
            cursor.expect('BY')
            token = cursor.peek()
            if token is None or token.kind is not TokenKind.WORD or token.is_word('INTO'):
                raise DslSyntaxError("ORDER BY requires a field name")
            cursor.advance()
            direction = cursor.accept('ASC', 'DESC') or 'ASC'
            order_by = st.SortSpec(token.value, st.SortDirection(direction))

        into = None
        if cursor.accept('INTO'):
            into = cursor.expect_string("output file")

        cls = st.SelectFiles if obj == 'FILES' else st.SelectFolders
        return cls(from_path=from_path, where=where, order_by=order_by, into=into)

    def _parse_merge(self, cursor: _Cursor) -> st.Statement:
        sources = []
        while cursor.peek() is not None and cursor.peek().kind is TokenKind.STRING:
            sources.append(cursor.expect_string("source file"))
        if not sources:
            raise DslSyntaxError("MERGE requires at least one source file")
        cursor.expect('TO')
        return st.Merge(tuple(sources), cursor.expect_string("destination file"))

    def _parse_chmod(self, cursor: _Cursor) -> st.Statement:
        name = cursor.expect_string("name")
        cursor.expect('TO')
        mode = cursor.expect_string("mode")
        if not _OCTAL_MODE_RE.match(mode):
            raise DslSyntaxError(f"Invalid permission mode '{mode}', expected octal like 644")
        return st.Chmod(name, mode)

    # Shared clauses

    def _parse_source(self, cursor: _Cursor,
                      terminators: Tuple[str, ...]) -> Tuple[Optional[str], Optional[str]]:
        """Parse the optional ``FROM "<dir>"`` and ``WHERE <predicate>`` clauses."""
        from_path = None
        where = None
        if cursor.accept('FROM'):
            from_path = cursor.expect_string("source folder")
        if cursor.accept('WHERE'):
            where = cursor.where_text(terminators)
        return from_path, where
