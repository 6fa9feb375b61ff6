#
# Exact-arithmetic reference vectors for fused multiply-add
#
# (c) Neil Booth 2007-2021.  All rights reserved.
#

from .values import *
from .arith import *
from .vectors import *

from . import values, arith, vectors

__all__ = values.__all__ + arith.__all__ + vectors.__all__
