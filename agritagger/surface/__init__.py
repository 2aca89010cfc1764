from agritagger.surface.memory import MemoryLayer, MemorySurface
from agritagger.surface.protocols import DrawingSurface, LayerTag, SurfaceLayer

__all__ = ["DrawingSurface", "LayerTag", "MemoryLayer", "MemorySurface", "SurfaceLayer"]
