from .loader import MapData, build_adjacency, load_map_data

__all__ = ["MapData", "build_adjacency", "load_map_data"]
