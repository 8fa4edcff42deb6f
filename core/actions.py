from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from core.collection import VisageCollection
from core.state import ToolState


logger = logging.getLogger(__name__)


class ActionKind(Enum):
    REORDER = "reorder"
    FLIP = "flip"
    ROTATE = "rotate"
    TOGGLE_ERASE = "toggle_erase"
    DELETE = "delete"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ToolbarAction:
    kind: ActionKind
    label: str
    icon: str
    blocked_while_erasing: bool


# Top-to-bottom toolbar order.
TOOLBAR: Tuple[ToolbarAction, ...] = (
    ToolbarAction(ActionKind.REORDER, "Move", "move.png", blocked_while_erasing=True),
    ToolbarAction(ActionKind.FLIP, "Flip", "flip.png", blocked_while_erasing=False),
    ToolbarAction(ActionKind.ROTATE, "Rotate", "rotate.png", blocked_while_erasing=False),
    ToolbarAction(ActionKind.TOGGLE_ERASE, "Erase", "erase.png", blocked_while_erasing=False),
    ToolbarAction(ActionKind.DELETE, "Delete", "delete.png", blocked_while_erasing=True),
    ToolbarAction(ActionKind.DUPLICATE, "Copy", "copy.png", blocked_while_erasing=True),
)


def toolbar_action(kind: ActionKind) -> ToolbarAction:
    for entry in TOOLBAR:
        if entry.kind is kind:
            return entry
    raise KeyError(kind)


def resolve_key_bindings(raw: Dict[str, str]) -> Dict[str, ActionKind]:
    out: Dict[str, ActionKind] = {}
    for key, action_id in raw.items():
        try:
            out[str(key).upper()] = ActionKind(action_id)
        except ValueError:
            logger.warning("Ignoring key binding %r -> unknown action %r", key, action_id)
    return out


def is_blocked(kind: ActionKind, tools: ToolState) -> bool:
    return tools.erase_active and toolbar_action(kind).blocked_while_erasing


def reorder(collection: VisageCollection, tools: ToolState) -> bool:
    if collection.selected is None or tools.erase_active:
        return False
    idx = collection.selected_index
    if idx == len(collection) - 1:
        collection.move_to_back(idx)
    else:
        collection.move_to_front(idx)
    return True


def flip(collection: VisageCollection, tools: ToolState) -> bool:
    v = collection.selected
    if v is None:
        return False
    v.surface = v.surface.flipped_horizontal()
    return True


def rotate(collection: VisageCollection, tools: ToolState) -> bool:
    v = collection.selected
    if v is None:
        return False
    v.surface = v.surface.rotated_cw()
    # Displayed rectangle adopts the rotated surface's natural size.
    v.w = v.surface.width
    v.h = v.surface.height
    return True


def delete(collection: VisageCollection, tools: ToolState) -> bool:
    if collection.selected is None or tools.erase_active:
        return False
    if len(collection) <= 1:
        collection.clear()
    else:
        collection.remove_at(collection.selected_index)
    return True


def duplicate(collection: VisageCollection, tools: ToolState, offset: int = 30) -> bool:
    v = collection.selected
    if v is None or tools.erase_active:
        return False
    idx = collection.insert_front(v.duplicate(offset))
    collection.select(idx)
    return True


def toggle_erase(collection: VisageCollection, tools: ToolState) -> bool:
    tools.erase_active = not tools.erase_active
    logger.info("Erasing: %s", tools.erase_active)
    return True


def run_action(
    kind: ActionKind,
    collection: VisageCollection,
    tools: ToolState,
    duplicate_offset: int = 30,
) -> bool:
    """Apply one toolbar action. Returns False when the action was a no-op."""
    if kind is ActionKind.REORDER:
        done = reorder(collection, tools)
    elif kind is ActionKind.FLIP:
        done = flip(collection, tools)
    elif kind is ActionKind.ROTATE:
        done = rotate(collection, tools)
    elif kind is ActionKind.TOGGLE_ERASE:
        done = toggle_erase(collection, tools)
    elif kind is ActionKind.DELETE:
        done = delete(collection, tools)
    elif kind is ActionKind.DUPLICATE:
        done = duplicate(collection, tools, offset=duplicate_offset)
    else:
        raise ValueError(f"unknown action: {kind!r}")

    if done:
        logger.debug("Action %s applied (%d visages)", kind.value, len(collection))
    else:
        logger.debug("Action %s ignored", kind.value)
    return done
