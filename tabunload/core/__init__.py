"""tabunload core package.

This package contains the extraction pipeline: channels, the row codec,
the connector/type-mapper/sink interfaces, workers and the partition
scheduler. Import concrete pieces from their modules, e.g.
``from tabunload.core.unloader import Unloader``.
"""
