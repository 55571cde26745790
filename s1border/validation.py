""" Eligibility checks of a product for border noise removal """
from collections import namedtuple

from s1border.errors import MalformedIdentifierError, ValidationError
from s1border.metadata import (
    ABS_CALIBRATION_FLAG,
    MISSING,
    MISSION,
    PRODUCT,
    PRODUCT_TYPE,
)

SENSOR_FAMILY = 'SENTINEL-1'
GRD_PRODUCT_TYPE = 'GRD'
PROCESSING_LEVEL = '1S'
POLARISATION_MODES = ['SH', 'SV', 'DH', 'DV', 'HH', 'HV', 'VV', 'VH']

ProductIdentifier = namedtuple('ProductIdentifier', [
    'name',
    'mission',
    'mode',
    'product_class',
    'processing_level',
    'polarisation_mode',
])


def parse_product_identifier(name):
    """ Split Sentinel-1 product name into its fixed-width fields

    Parameters
    ----------
    name : str
        product name, e.g. S1A_IW_GRDH_1SDV_20190101T000000_...

    Returns
    -------
    identifier : ProductIdentifier

    """
    if not isinstance(name, str) or len(name) < 16:
        raise MalformedIdentifierError('Cannot parse product name: %r' % (name,))
    return ProductIdentifier(
        name=name,
        mission=name[:3],
        mode=name[4:6],
        product_class=name[7:11],
        processing_level=name[12:14],
        polarisation_mode=name[14:16],
    )


def check_source_product_validity(abs_root):
    ''' Raise ValidationError unless abstracted metadata describe an uncalibrated S1 L1 GRD '''
    mission = abs_root.get_attribute_string(MISSION, default='')
    if not mission.startswith(SENSOR_FAMILY):
        raise ValidationError('Input should be a Sentinel-1 GRD product.')

    product_type = abs_root.get_attribute_string(PRODUCT_TYPE, default='')
    if product_type != GRD_PRODUCT_TYPE:
        raise ValidationError('Input should be a GRD product.')

    product_name = abs_root.get_attribute_string(PRODUCT)
    if product_name is MISSING:
        raise MalformedIdentifierError('Product name is missing in metadata')
    identifier = parse_product_identifier(product_name)
    if identifier.processing_level != PROCESSING_LEVEL:
        raise ValidationError('Input should be a level-1 product.')
    if identifier.polarisation_mode not in POLARISATION_MODES:
        raise ValidationError('Unknown source product polarization')

    if abs_root.get_attribute_bool(ABS_CALIBRATION_FLAG, default=False):
        raise ValidationError('Border noise cannot be removed from a calibrated product.')
    return identifier
