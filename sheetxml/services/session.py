from typing import Dict, Iterable, List, Optional, Set
import logging
import uuid

from ..errors import ParseError, SessionNotFound, UnknownSheet
from ..models.schemas import Sheet, SheetSummary
from ..utils.converter import converter, download_filename
from .workbook import extract_sheets

log = logging.getLogger(__name__)


class ConversionSession:
    """State of one user's conversion flow.

    Holds the loaded sheets, the selection and the last generated document.
    A failed operation leaves the session in a state the user can retry from.
    """

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.file_name: Optional[str] = None
        self.sheets: List[Sheet] = []
        self.selected: Set[str] = set()
        self.xml_output: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.file_name is not None

    def load(self, content: bytes, filename: Optional[str] = None,
             content_type: Optional[str] = None) -> List[Sheet]:
        """Extract a workbook and select all of its sheets."""
        try:
            sheets = extract_sheets(content, filename, content_type)
        except ParseError:
            self.reset()
            raise

        self.file_name = filename or ""
        self.sheets = sheets
        self.selected = {sheet.name for sheet in sheets}
        self.xml_output = None
        log.info("Session %s loaded %d sheet(s) from %r", self.session_id, len(sheets), filename)
        return sheets

    def _check_names(self, names: Iterable[str]) -> None:
        known = {sheet.name for sheet in self.sheets}
        unknown = [name for name in names if name not in known]
        if unknown:
            raise UnknownSheet(f"Unknown sheet(s): {', '.join(unknown)}")

    def toggle(self, name: str) -> bool:
        """Flip the selection of one sheet; returns whether it is now selected."""
        self._check_names([name])
        # A stored document no longer matches a changed selection
        self.xml_output = None
        if name in self.selected:
            self.selected.discard(name)
            return False
        self.selected.add(name)
        return True

    def select(self, names: Iterable[str]) -> None:
        names = list(names)
        self._check_names(names)
        self.selected = set(names)
        self.xml_output = None

    def convert(self) -> str:
        xml = converter.convert(self.sheets, self.selected)
        self.xml_output = xml
        return xml

    @property
    def download_name(self) -> str:
        return download_filename(self.file_name)

    @property
    def selected_count(self) -> int:
        return sum(1 for sheet in self.sheets if sheet.name in self.selected)

    def summaries(self) -> List[SheetSummary]:
        return [
            SheetSummary(
                name=sheet.name,
                row_count=max(len(sheet.rows) - 1, 0),
                selected=sheet.name in self.selected,
            )
            for sheet in self.sheets
        ]

    def reset(self) -> None:
        self.file_name = None
        self.sheets = []
        self.selected = set()
        self.xml_output = None


class SessionStore:
    """In-memory registry of conversion sessions, keyed by session id."""

    def __init__(self):
        self._sessions: Dict[str, ConversionSession] = {}

    def create(self) -> ConversionSession:
        session = ConversionSession()
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ConversionSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(f"No conversion session with id {session_id}") from None

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

# Create singleton instance
sessions = SessionStore()
