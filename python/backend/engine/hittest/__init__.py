from backend.engine.hittest.registry import BoundsProvider, HitTestRegistry, Region

__all__ = ["BoundsProvider", "HitTestRegistry", "Region"]
