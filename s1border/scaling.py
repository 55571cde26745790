""" IPF version and noise power scaling of Sentinel-1 GRD products """
from collections import namedtuple
import logging

from s1border.errors import UnsupportedModeError, ValidationError
from s1border.metadata import ACQUISITION_MODE, MISSING, PROCESSING_SYSTEM_IDENTIFIER

logger = logging.getLogger(__name__)

# noise calibration constant (Knoise) of the acquisition modes
NOISE_CALIBRATION_CONSTANT = { 'IW': 75088.7,
                               'EW': 56065.87 }
# IPF versions where noise LUT scaling changed
DN0_SQUARED_VERSION = 2.34
UNSCALED_NOISE_VERSION = 2.50

ScalingContext = namedtuple('ScalingContext', [
    'ipf_version',
    'acquisition_mode',
    'knoise',
    'dn0',
    'scaling_factor',
])


def parse_ipf_version(processing_system_identifier):
    """ Get IPF version from processing system identifier

    The version is the last space separated token, e.g.
    "ESA Sentinel-1 IPF 002.71" gives 2.71

    """
    if processing_system_identifier is MISSING or not str(processing_system_identifier).strip():
        raise ValidationError('Processing system identifier is missing')
    token = str(processing_system_identifier).strip().split(' ')[-1]
    try:
        return float(token)
    except ValueError:
        raise ValidationError('Cannot read IPF version from "%s"' % processing_system_identifier)


def get_noise_calibration_constant(acquisition_mode):
    ''' Get Knoise for IW or EW acquisition mode '''
    for mode in ['IW', 'EW']:
        if mode in acquisition_mode:
            return NOISE_CALIBRATION_CONSTANT[mode]
    raise UnsupportedModeError(
        'Cannot remove border noise from %s acquisition mode' % acquisition_mode)


def get_dn0(calibration_provider, co_polarization):
    """ Get the first element of the first DN calibration vector of co-polarization

    Parameters
    ----------
    calibration_provider : object
        has method get_calibration_vectors(polarisations, cal_type)
    co_polarization : str
        HH or VV

    Returns
    -------
    dn0 : float
        0.0 if the provider has no vectors for the co-polarization

    """
    calibration = calibration_provider.get_calibration_vectors([co_polarization], 'dn')
    for polarization, vectors in calibration:
        if co_polarization in polarization:
            return float(vectors[0][0])
    logger.warning('No DN calibration vector for %s, DN0 is set to 0', co_polarization)
    return 0.0


def compute_noise_scaling_factor(ipf_version, knoise, dn0):
    ''' Scaling of noise LUT values depending on IPF version '''
    if ipf_version < DN0_SQUARED_VERSION:
        return knoise * dn0
    if ipf_version < UNSCALED_NOISE_VERSION:
        return knoise * dn0 * dn0
    return 1.0


def resolve_scaling(abs_root, calibration_provider, co_polarization):
    ''' Compute ScalingContext from abstracted metadata and calibration vectors '''
    ipf_version = parse_ipf_version(abs_root.get_attribute_string(PROCESSING_SYSTEM_IDENTIFIER))
    acquisition_mode = abs_root.get_attribute_string(ACQUISITION_MODE, default='')
    try:
        knoise = get_noise_calibration_constant(acquisition_mode)
    except UnsupportedModeError:
        # Knoise is needed only for scaled noise LUTs
        if ipf_version < UNSCALED_NOISE_VERSION:
            raise
        knoise = None
    dn0 = get_dn0(calibration_provider, co_polarization)
    scaling_factor = compute_noise_scaling_factor(ipf_version, knoise, dn0)
    if ipf_version < UNSCALED_NOISE_VERSION:
        logger.warning('IPF version %.2f is lower than %.2f, noise LUT is scaled by %g',
                       ipf_version, UNSCALED_NOISE_VERSION, scaling_factor)
    return ScalingContext(
        ipf_version=ipf_version,
        acquisition_mode=acquisition_mode,
        knoise=knoise,
        dn0=dn0,
        scaling_factor=scaling_factor,
    )
