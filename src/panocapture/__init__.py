"""
Panorama capture pipeline

Guides a user through capturing 16 photos around a full sphere using live
device orientation: smoothing, target highlighting, dot projection and the
capture/retake flow, up to handing the set to a stitching service.
"""

__version__ = "0.1.0"
