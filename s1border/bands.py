""" Co-polarization detection, band selection and target band descriptors """
from collections import namedtuple

from s1border.errors import MissingCoPolarizationError, MissingUnitError

AMPLITUDE = 'amplitude'
INTENSITY = 'intensity'
CO_POLARIZATIONS = ['HH', 'VV']


class BandDescriptor(namedtuple('BandDescriptor', [
        'name',
        'data_type',
        'width',
        'height',
        'unit',
        'no_data_value',
        'no_data_value_used',
        'description',
        'expression'])):
    """ Raster band properties. Bands with an expression are virtual. """
    __slots__ = ()

    def __new__(cls, name, data_type, width, height, unit=None, no_data_value=0.0,
                no_data_value_used=False, description='', expression=None):
        return super(BandDescriptor, cls).__new__(
            cls, name, data_type, width, height, unit, no_data_value,
            no_data_value_used, description, expression)

    @property
    def is_virtual(self):
        return self.expression is not None


def find_co_polarization(bands):
    ''' Get co-polarization and the first band which name contains HH or VV '''
    for band in bands:
        for pol in CO_POLARIZATIONS:
            if pol in band.name:
                return pol, band
    raise MissingCoPolarizationError(
        'Input product does not contain band with HH or VV polarization')


def contains_selected_polarisations(band_name, selected_polarisations):
    return any(pol in band_name for pol in selected_polarisations)


def select_bands(bands, selected_polarisations=None):
    """ Get amplitude and intensity bands in the selected polarisations

    Parameters
    ----------
    bands : list of BandDescriptor
        source bands
    selected_polarisations : list of str or None
        keep only bands which names contain one of these; all if None or empty

    Returns
    -------
    selected : list of BandDescriptor

    """
    selected = []
    for band in bands:
        if band.unit is None:
            raise MissingUnitError('band %s requires a unit' % band.name)
        if AMPLITUDE not in band.unit and INTENSITY not in band.unit:
            continue
        if selected_polarisations and not contains_selected_polarisations(
                band.name, selected_polarisations):
            continue
        selected.append(band)
    return selected


def create_target_bands(source_bands):
    ''' Mirror source band descriptors; virtual bands keep their expression '''
    return [band._replace() for band in source_bands]
