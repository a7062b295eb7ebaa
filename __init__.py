from .ternarygenus.genus import Genus, HeckeSparseMatrix
from .ternarygenus.quadform import PrimeSymbol, TernaryForm, form_from_symbols, mass_x24
from .ternarygenus.precision import FixedWidthPrecision, precision_strategy
