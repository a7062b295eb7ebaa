r"""

Exceptions raised by ternarygenus

"""

# ****************************************************************************
#       Copyright (C) 2020-2024 Brandon Williams
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 2 of the License, or
# (at your option) any later version.
#                  https://www.gnu.org/licenses/
# ****************************************************************************


class GenusConsistencyError(RuntimeError):
    r"""
    An internal invariant failed (for example a neighbor of the wrong discriminant).

    This indicates a defect in the algorithm or its arithmetic and is never retried.
    """
    pass


class PrecisionOverflowError(OverflowError):
    r"""
    A fixed-width precision strategy could not represent a value.

    Retrying with ArbitraryPrecision() avoids this.
    """
    pass
