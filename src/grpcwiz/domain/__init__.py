"""Domain layer: descriptors, field kinds, the type mapper, and validation.

Pure data and pure functions.  Nothing here touches the filesystem,
templates, or the network.
"""
