from .errors import GenusConsistencyError, PrecisionOverflowError
from .genus import Genus, HeckeSparseMatrix
from .genusrep import GenusRep, GenusRepTable
from .isometry import Isometry
from .neighbors import FiniteFieldSampler, NeighborManager
from .precision import ArbitraryPrecision, FixedWidthPrecision, precision_strategy
from .quadform import PrimeSymbol, TernaryForm, form_from_symbols, mass_x24, prime_symbols
from .spinor import Spinor
