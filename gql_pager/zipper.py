"""Cursor over an arena tree with incremental, path-copying replacement."""
from dataclasses import dataclass
from typing import Optional, Tuple

from gql_pager.errors import InvariantViolation
from gql_pager.tree import Arena, Mapping, children, to_plain, with_child


@dataclass(frozen=True)
class Frame:
    parent_id: int
    index: int


@dataclass(frozen=True)
class Zipper:
    """Focus location plus the chain of parents leading to it.

    A zipper is a value: operations return new zippers and a zipper obtained
    before a `replace` must not be used afterwards.
    """
    arena: Arena
    focus_id: int
    ancestors: Tuple[Frame, ...] = ()
    end: bool = False

    @classmethod
    def at_root(cls, arena: Arena, root_id: int) -> "Zipper":
        return cls(arena, root_id)

    @property
    def node(self):
        return self.arena.get(self.focus_id)

    @property
    def at_end(self) -> bool:
        return self.end

    def _require_live(self, op: str):
        if self.end:
            raise InvariantViolation(f"Cannot {op} past the end of the traversal")

    def down(self) -> "Zipper":
        self._require_live("descend")
        kids = children(self.node)
        if not kids:
            raise InvariantViolation(f"Cannot descend into {type(self.node).__name__} without children")
        return Zipper(self.arena, kids[0], self.ancestors + (Frame(self.focus_id, 0),))

    def up(self) -> "Zipper":
        self._require_live("ascend")
        if not self.ancestors:
            raise InvariantViolation("Cannot ascend from the root")
        return Zipper(self.arena, self.ancestors[-1].parent_id, self.ancestors[:-1])

    def next(self) -> "Zipper":
        """Advance in pre-order. Past the last node the zipper is at the end."""
        self._require_live("advance")
        if children(self.node):
            return self.down()
        ancestors = self.ancestors
        while ancestors:
            frame = ancestors[-1]
            siblings = children(self.arena.get(frame.parent_id))
            if frame.index + 1 < len(siblings):
                return Zipper(
                    self.arena,
                    siblings[frame.index + 1],
                    ancestors[:-1] + (Frame(frame.parent_id, frame.index + 1),),
                )
            ancestors = ancestors[:-1]
        return Zipper(self.arena, self.root_id(), (), True)

    def replace(self, node) -> "Zipper":
        """Put `node` at the focus, re-allocating each ancestor up to the root."""
        self._require_live("replace")
        child_id = self.arena.alloc(node)
        focus_id = child_id
        frames = []
        for frame in reversed(self.ancestors):
            parent_id = self.arena.alloc(with_child(self.arena.get(frame.parent_id), frame.index, child_id))
            frames.append(Frame(parent_id, frame.index))
            child_id = parent_id
        return Zipper(self.arena, focus_id, tuple(reversed(frames)))

    def root_id(self) -> int:
        if self.ancestors:
            return self.ancestors[0].parent_id
        return self.focus_id

    def root(self):
        return to_plain(self.arena, self.root_id())

    def field_path(self) -> Tuple[str, ...]:
        """Field names from the root to the focus; list positions are skipped."""
        path = []
        for frame in self.ancestors:
            parent = self.arena.get(frame.parent_id)
            if isinstance(parent, Mapping):
                path.append(parent.fields[frame.index][0])
        return tuple(path)

    def nearest_mapping(self) -> Optional[Mapping]:
        for frame in reversed(self.ancestors):
            parent = self.arena.get(frame.parent_id)
            if isinstance(parent, Mapping):
                return parent
        return None
