""" Removal of border noise from Sentinel-1 GRD products

Border pixels (closer than border_limit to any image edge) are denoised with
the co-polarization noise LUT. Pixels with denoised amplitude below
trim_threshold are replaced by the no-data value in every band, all other
pixels are copied from the source bands.

"""
from collections import OrderedDict, namedtuple
import logging
import threading

import numpy as np

from s1border.bands import create_target_bands, find_co_polarization, select_bands
from s1border.errors import BorderNoiseError, TileComputationError
from s1border.noise import build_noise_lut, get_thermal_noise_correction_flag, select_noise_vector
from s1border.raster import TILE_SIZE, iter_tiles
from s1border.scaling import resolve_scaling
from s1border.validation import check_source_product_validity

logger = logging.getLogger(__name__)

BORDER_LIMIT = 500
TRIM_THRESHOLD = 0.5
# co-polarization amplitude below which the denoised value is zero
MIN_CO_POL_VALUE = 30

BorderNoiseContext = namedtuple('BorderNoiseContext', [
    'identifier',
    'scaling',
    'co_polarization',
    'co_pol_band',
    'thermal_noise_corrected',
    'noise_vector',
    'noise_lut',
    'target_bands',
    'width',
    'height',
])


def get_border_mask(rect, width, height, border_limit=BORDER_LIMIT):
    ''' True for pixels of the rectangle which are closer than border_limit to image edges '''
    x0, y0, w, h = rect
    x = np.arange(x0, x0 + w)
    y = np.arange(y0, y0 + h)
    border_x = (x < border_limit) | (x > width - border_limit)
    border_y = (y < border_limit) | (y > height - border_limit)
    return border_y[:, None] | border_x[None, :]


def get_denoised_amplitude(co_pol, noise_lut):
    ''' sqrt(max(v**2 - noise, 0)) with zero for values below MIN_CO_POL_VALUE '''
    co_pol = np.asarray(co_pol, dtype=np.float64)
    with np.errstate(invalid='ignore'):
        denoised = np.sqrt(np.maximum(co_pol * co_pol - noise_lut, 0.0))
        denoised[co_pol < MIN_CO_POL_VALUE] = 0
    return denoised


def cast_no_data_value(no_data_value, dtype):
    ''' No-data value converted to dtype, integers wrap around when out of range '''
    value = np.asarray(no_data_value, dtype=np.float64)
    if np.issubdtype(dtype, np.integer):
        value = value.astype(np.int64)
    return value.astype(dtype)[()]


def _compute_tile(rect, source_tiles, co_pol_tile, noise_lut, width, height,
                  no_data_values, co_pol_no_data_value, border_limit, trim_threshold,
                  target_tiles):
    x0, y0, w, h = rect
    co_pol = np.asarray(co_pol_tile, dtype=np.float64)
    if co_pol.shape != (h, w):
        raise ValueError('Co-polarization tile shape %s does not match rectangle %s'
                         % (co_pol.shape, rect))
    if len(source_tiles) != len(no_data_values):
        raise ValueError('Got %d source tiles and %d no-data values'
                         % (len(source_tiles), len(no_data_values)))
    if target_tiles is None:
        target_tiles = [np.empty((h, w), dtype=np.asarray(source).dtype) for source in source_tiles]
        for target, no_data_value in zip(target_tiles, no_data_values):
            target.fill(cast_no_data_value(no_data_value, target.dtype))

    border = get_border_mask(rect, width, height, border_limit)
    denoised = get_denoised_amplitude(co_pol, noise_lut[x0:x0 + w])
    unwritten = border & (co_pol == co_pol_no_data_value)
    with np.errstate(invalid='ignore'):
        trimmed = border & ~unwritten & (denoised < trim_threshold)
    copied = ~(unwritten | trimmed)

    for source, target, no_data_value in zip(source_tiles, target_tiles, no_data_values):
        source = np.asarray(source)
        if source.shape != (h, w) or target.shape != (h, w):
            raise ValueError('Band tile shape does not match rectangle %s' % (rect,))
        target[copied] = source[copied]
        target[trimmed] = cast_no_data_value(no_data_value, target.dtype)
    return target_tiles


def compute_tile(rect, source_tiles, co_pol_tile, noise_lut, width, height,
                 no_data_values, co_pol_no_data_value, border_limit=BORDER_LIMIT,
                 trim_threshold=TRIM_THRESHOLD, target_tiles=None):
    """ Remove border noise from one tile of all bands

    Parameters
    ----------
    rect : tuple
        (x0, y0, width, height) of the tile in image coordinates
    source_tiles : list of 2D numpy.array
        pixel values of each band in the tile
    co_pol_tile : 2D numpy.array
        pixel values of the co-polarization band in the tile
    noise_lut : 1D numpy.array
        scaled noise power for every image column
    width, height : int
        size of the image
    no_data_values : list of float
        no-data value of each band
    co_pol_no_data_value : float
        no-data value of the co-polarization band
    border_limit : int
        border margin in pixels
    trim_threshold : float
        pixels with smaller denoised amplitude are set to no-data
    target_tiles : list of 2D numpy.array or None
        output buffers, modified in place. Border pixels where co-polarization
        equals its no-data value are not written. If None, buffers are created
        and filled with the no-data value of each band.

    Returns
    -------
    target_tiles : list of 2D numpy.array

    """
    try:
        return _compute_tile(rect, source_tiles, co_pol_tile, noise_lut, width, height,
                             no_data_values, co_pol_no_data_value, border_limit,
                             trim_threshold, target_tiles)
    except Exception as e:
        raise TileComputationError(str(e)) from e


class BorderNoiseRemoval(object):
    """ Mask no-value pixels in the border region of a Sentinel-1 GRD product

    Parameters
    ----------
    product : object
        source product with attributes abstracted_metadata, original_metadata,
        bands, width, height and methods get_calibration_vectors(), read_tile()
    selected_polarisations : list of str or None
        process only bands with these polarisations (all if None or empty)
    border_limit : int
        border margin in pixels
    trim_threshold : float
        threshold of denoised amplitude

    """
    def __init__(self, product, selected_polarisations=None,
                 border_limit=BORDER_LIMIT, trim_threshold=TRIM_THRESHOLD):
        self.product = product
        self.selected_polarisations = list(selected_polarisations or [])
        self.border_limit = border_limit
        self.trim_threshold = trim_threshold
        self.context = None
        self._lock = threading.Lock()

    def initialize(self):
        ''' Check the product and prepare noise LUT and target bands '''
        abs_root = self.product.abstracted_metadata
        orig_root = self.product.original_metadata
        identifier = check_source_product_validity(abs_root)
        co_polarization, co_pol_band = find_co_polarization(self.product.bands)
        thermal_noise_corrected = get_thermal_noise_correction_flag(orig_root)
        if thermal_noise_corrected:
            logger.info('Thermal noise correction was already performed, noise LUT is zero')
            noise_vector = None
        else:
            noise_vector = select_noise_vector(orig_root, co_polarization)
        scaling = resolve_scaling(abs_root, self.product, co_polarization)
        noise_lut = build_noise_lut(noise_vector, self.product.width,
                                    scaling.scaling_factor, thermal_noise_corrected)
        target_bands = create_target_bands(
            select_bands(self.product.bands, self.selected_polarisations))
        logger.info('%s: IPF %.2f, co-polarization band %s, %d target bands',
                    identifier.name, scaling.ipf_version, co_pol_band.name, len(target_bands))
        self.context = BorderNoiseContext(
            identifier=identifier,
            scaling=scaling,
            co_polarization=co_polarization,
            co_pol_band=co_pol_band,
            thermal_noise_corrected=thermal_noise_corrected,
            noise_vector=noise_vector,
            noise_lut=noise_lut,
            target_bands=target_bands,
            width=self.product.width,
            height=self.product.height,
        )
        return self.context

    def get_context(self):
        ''' Context of initialize(), computed once even with concurrent callers '''
        if self.context is None:
            with self._lock:
                if self.context is None:
                    self.initialize()
        return self.context

    def compute_tile_stack(self, rect):
        """ Compute all materialised target bands for one tile

        Returns
        -------
        tiles : OrderedDict
            band name -> 2D numpy.array

        """
        context = self.get_context()
        bands = [band for band in context.target_bands if not band.is_virtual]
        try:
            source_tiles = [self.product.read_tile(band.name, rect) for band in bands]
            co_pol_tile = self.product.read_tile(context.co_pol_band.name, rect)
            target_tiles = _compute_tile(
                rect, source_tiles, co_pol_tile, context.noise_lut,
                context.width, context.height,
                [band.no_data_value for band in bands],
                context.co_pol_band.no_data_value,
                self.border_limit, self.trim_threshold, None)
        except BorderNoiseError:
            raise
        except Exception as e:
            raise TileComputationError(str(e)) from e
        return OrderedDict(zip([band.name for band in bands], target_tiles))

    def run(self, writer, tile_size=TILE_SIZE):
        ''' Compute all tiles and pass them to writer.write_tiles(rect, tiles) '''
        context = self.get_context()
        for rect in iter_tiles(context.width, context.height, tile_size):
            logger.debug('Compute tile %s', rect)
            writer.write_tiles(rect, self.compute_tile_stack(rect))
