"""State carried by one top-level fetch between transport calls."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from gql_pager.spec import Path, SpecEntry, SpecTable


class WalkState(Enum):
    START = "start"
    WALK = "walk"
    AWAIT = "await"
    DONE = "done"


@dataclass
class Request:
    """One logical fetch in progress.

    `state` together with the saved `focus` is the suspended computation: when
    the walker returns a follow-up call it leaves the request in AWAIT with the
    zipper pointing at the connection being paginated, and the next response
    resumes exactly there.
    """
    endpoint: str
    headers: Dict[str, str]
    table: SpecTable
    query_sources: Dict[str, str]
    root_path: Path
    callback: Callable[[Any], None]
    errorback: Optional[Callable[[Any, Optional[int]], None]] = None
    constants: Dict[str, Any] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)
    state: WalkState = WalkState.START
    focus: Any = None
    pending: Optional[SpecEntry] = None
    calls: int = 0
