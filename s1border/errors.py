class BorderNoiseError(Exception):
    """ Base class for all errors raised by s1border """


class ValidationError(BorderNoiseError):
    """ Input product is not eligible for border noise removal """


class MalformedIdentifierError(ValidationError):
    """ Product name is too short or missing to be parsed """


class UnsupportedModeError(BorderNoiseError):
    """ Acquisition mode has no known noise calibration constant """


class MissingNoiseVectorError(BorderNoiseError):
    """ No noise vector for the co-polarization band """


class MissingCoPolarizationError(BorderNoiseError):
    """ Product has no HH or VV band """


class MissingUnitError(BorderNoiseError):
    """ Source band has no physical unit """


class TileComputationError(BorderNoiseError):
    """ Failure while computing a target tile """
