"""
Patch application and state diffs for client updates.
"""

import copy
from dataclasses import fields, replace
from typing import Any, Dict, List, Optional

from .models import Room, RoomPatch
from .serialization import sanitize_state

ROOM_FIELDS = frozenset(f.name for f in fields(Room))


def apply_patch(room: Room, patch: RoomPatch) -> Room:
    """
    Return a new Room with the patch fields replaced.

    Args:
        room: Current room state (left untouched)
        patch: Changed fields keyed by Room attribute name

    Returns:
        Updated room
    """
    unknown = set(patch) - ROOM_FIELDS
    if unknown:
        raise ValueError(f"Unknown room fields in patch: {sorted(unknown)}")
    return replace(room, **copy.deepcopy(patch))


def compute_diff(
    old_state: Optional[Room],
    new_state: Room,
    viewer_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Compute a JSON Patch-style diff between two states.

    Args:
        old_state: Previous room state
        new_state: New room state
        viewer_id: ID of the player viewing the state

    Returns:
        List of patch operations
    """
    if old_state is None:
        # First state, no diff needed
        return []

    # Sanitize both states for the viewer
    old_sanitized = sanitize_state(old_state, viewer_id)
    new_sanitized = sanitize_state(new_state, viewer_id)

    ops = []
    for field in new_sanitized:
        if field not in old_sanitized:
            ops.append({"op": "add", "path": f"/{field}", "value": new_sanitized[field]})
        elif old_sanitized[field] != new_sanitized[field]:
            ops.append({"op": "replace", "path": f"/{field}", "value": new_sanitized[field]})

    for field in old_sanitized:
        if field not in new_sanitized:
            ops.append({"op": "remove", "path": f"/{field}"})

    return ops


def should_send_full_state(ops: List[Dict[str, Any]], threshold: int = 10) -> bool:
    """Send the full state instead of a diff when the diff is large."""
    return len(ops) > threshold
