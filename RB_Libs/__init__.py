"""
RB_Libs - Region Blur Library Modules

This package contains the region-based blur compositing engine,
organized into specialized sub-packages:

- ImageEditingLib: Image models, mask rasterizing, blur, compositing and the photo pipeline
- FaceLib: Face quality policy, nearest-centroid matching and detector adapters
- VideoLib: Immutable blur jobs, the per-frame compositor and the export runner
- NodesLib: Node executors for graph-based hosts
"""

__version__ = "0.1.0"
