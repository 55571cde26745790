from s1border.bands import BandDescriptor
from s1border.errors import (
    BorderNoiseError,
    MalformedIdentifierError,
    MissingCoPolarizationError,
    MissingNoiseVectorError,
    MissingUnitError,
    TileComputationError,
    UnsupportedModeError,
    ValidationError,
)
from s1border.noise import NoiseVector, build_noise_lut
from s1border.processor import BorderNoiseRemoval, compute_tile
from s1border.safe import Sentinel1Product

__version__ = '0.1.0'
