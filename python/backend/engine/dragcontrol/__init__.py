from backend.engine.dragcontrol.controller import (
    DragSession,
    DropKind,
    DropResult,
    Haptics,
    NullHaptics,
    PointerDragController,
)

__all__ = [
    "DragSession",
    "DropKind",
    "DropResult",
    "Haptics",
    "NullHaptics",
    "PointerDragController",
]
