"""
DataLens: profiling and missing-data analysis for tabular datasets
===================================================================

The profiling engine lives in :mod:`datalens.data_profiler`; shared
exception types live in :mod:`datalens.exceptions`.
"""

from ._version import __version__

__author__ = "DataLens Team"
__license__ = "MIT"

__all__ = ["__version__"]
