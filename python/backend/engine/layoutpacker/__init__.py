from backend.engine.layoutpacker.packer import LayoutPacker, PackResult

__all__ = ["LayoutPacker", "PackResult"]
