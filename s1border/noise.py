""" Selection of the representative noise vector and per-column noise LUT """
from collections import namedtuple
import logging

import numpy as np

from s1border.errors import MissingNoiseVectorError, ValidationError

logger = logging.getLogger(__name__)

# names of noise vector list, vector and LUT before and after IPF 2.9
NOISE_VECTOR_NAMES = [
    ('noiseVectorList', 'noiseVector', 'noiseLut'),
    ('noiseRangeVectorList', 'noiseRangeVector', 'noiseRangeLut'),
]
PROCESSING_INFORMATION_PATH = ['product', 'imageAnnotation', 'processingInformation']


class NoiseVector(namedtuple('NoiseVector', ['azimuth_time', 'line', 'pixels', 'noise'])):
    """ Noise power at control pixels of one range line

    Pixels must be strictly increasing and have at least two elements.
    Arrays are read-only.

    """
    __slots__ = ()

    def __new__(cls, azimuth_time, line, pixels, noise):
        pixels = np.array(pixels, dtype=int)
        noise = np.array(noise, dtype=float)
        if pixels.ndim != 1 or pixels.size < 2:
            raise ValueError('Noise vector needs at least two control points')
        if pixels.size != noise.size:
            raise ValueError('Noise vector has %d pixels and %d noise values' % (pixels.size, noise.size))
        if np.any(np.diff(pixels) <= 0):
            raise ValueError('Noise vector pixels must be strictly increasing')
        pixels.flags.writeable = False
        noise.flags.writeable = False
        return super(NoiseVector, cls).__new__(cls, azimuth_time, line, pixels, noise)

    @classmethod
    def from_element(cls, element, lut_name):
        ''' Create NoiseVector from a noiseVector/noiseRangeVector metadata element '''
        return cls(
            element.get_attribute_string('azimuthTime', default=None),
            element.get_attribute_int('line', default=0),
            [int(round(float(i))) for i in element.get_attribute_string('pixel').split()],
            [float(i) for i in element.get_attribute_string(lut_name).split()],
        )


def get_thermal_noise_correction_flag(orig_root):
    ''' Read thermalNoiseCorrectionPerformed from the first annotation dataset '''
    annotation = orig_root.get_element('annotation')
    datasets = annotation.get_elements() if annotation is not None else []
    if not datasets:
        raise ValidationError('Input product has no annotation metadata')
    processing_information = datasets[0].get_element_path(PROCESSING_INFORMATION_PATH)
    if processing_information is None:
        raise ValidationError('Input product has no processing information in annotation')
    return processing_information.get_attribute_bool('thermalNoiseCorrectionPerformed', default=False)


def get_noise_vectors(noise_element):
    ''' Get all range noise vectors from a noise dataset '''
    for list_name, vector_name, lut_name in NOISE_VECTOR_NAMES:
        vector_list = noise_element.get_element(list_name)
        if vector_list is None:
            continue
        vectors = [NoiseVector.from_element(element, lut_name)
                   for element in vector_list.get_elements()
                   if element.name == vector_name]
        count = vector_list.get_attribute_int('count', default=len(vectors))
        return vectors, count
    return [], 0


def select_noise_vector(orig_root, co_polarization):
    """ Get the middle noise vector of the co-polarization

    Parameters
    ----------
    orig_root : MetadataElement
        original product metadata with element "noise"
    co_polarization : str
        HH or VV

    Returns
    -------
    noise_vector : NoiseVector

    """
    noise = orig_root.get_element('noise')
    datasets = noise.get_elements() if noise is not None else []
    for dataset in datasets:
        noise_element = dataset.get_element('noise')
        if noise_element is None:
            continue
        ads_header = noise_element.get_element('adsHeader')
        if ads_header is None:
            continue
        pol = ads_header.get_attribute_string('polarisation', default=None)
        if pol is None or pol not in co_polarization:
            continue
        vectors, count = get_noise_vectors(noise_element)
        if not vectors:
            break
        index = count // 2 if 0 < count <= len(vectors) else len(vectors) // 2
        logger.debug('Noise vector %d of %d is used for %s', index, len(vectors), co_polarization)
        return vectors[index]
    raise MissingNoiseVectorError(
        'Input product does not have noise vector for %s band' % co_polarization)


def get_segment_indices(pixels, width):
    """ Index of the noise vector interval used for each column

    For column x this is the smallest i with x <= pixels[i], minus one,
    clipped to the first and the last interval. Columns outside of the noise
    vector are extrapolated from the outer intervals.

    """
    columns = np.arange(width)
    return np.clip(np.searchsorted(pixels, columns, side='left') - 1, 0, len(pixels) - 2)


def build_noise_lut(noise_vector, width, scaling_factor, thermal_noise_corrected=False):
    """ Linearly interpolate noise vector to every column of the image

    Parameters
    ----------
    noise_vector : NoiseVector or None
        not used if thermal_noise_corrected is True
    width : int
        number of columns in the image
    scaling_factor : float
        multiplier of the interpolated noise power
    thermal_noise_corrected : bool
        if True the product was already denoised and the LUT is all zeros

    Returns
    -------
    noise_lut : 1D numpy.array
        read-only float64 array of size <width>

    """
    if thermal_noise_corrected:
        noise_lut = np.zeros(width)
    elif noise_vector is None:
        raise ValueError('Noise vector is required to build noise LUT')
    else:
        pixels = noise_vector.pixels
        noise = noise_vector.noise
        segments = get_segment_indices(pixels, width)
        x0 = pixels[segments]
        x1 = pixels[segments + 1]
        n0 = noise[segments]
        n1 = noise[segments + 1]
        mu = (np.arange(width) - x0) / (x1 - x0).astype(float)
        noise_lut = (n0 + (n1 - n0) * mu) * scaling_factor
    noise_lut.flags.writeable = False
    return noise_lut
