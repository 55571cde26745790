""" Tiling and GDAL raster input/output """
import logging
import threading

import numpy as np
try:
    from osgeo import gdal, gdal_array
except ImportError:
    GDAL_AVAILABLE = False
else:
    GDAL_AVAILABLE = True

logger = logging.getLogger(__name__)

TILE_SIZE = 512
GTIFF_OPTIONS = ['COMPRESS=LZW', 'TILED=YES', 'BIGTIFF=IF_SAFER']


def check_gdal():
    if not GDAL_AVAILABLE:
        raise ImportError(' GDAL is not installed and I can\'t read or write rasters. '
                          ' Install GDAL with Python bindings (osgeo). ')


def iter_tiles(width, height, tile_size=TILE_SIZE):
    ''' Yield (x0, y0, w, h) rectangles covering the image in row-major order '''
    if tile_size <= 0:
        raise ValueError('Tile size must be positive')
    for y0 in range(0, height, tile_size):
        for x0 in range(0, width, tile_size):
            yield (x0, y0, min(tile_size, width - x0), min(tile_size, height - y0))


class GdalTileReader(object):
    """ Read rectangular windows from the first band of raster files

    GDAL dataset handles are not thread safe, so every thread opens its own
    datasets.

    """
    def __init__(self):
        check_gdal()
        self._local = threading.local()

    @property
    def _datasets(self):
        if not hasattr(self._local, 'datasets'):
            self._local.datasets = {}
        return self._local.datasets

    def open(self, filename):
        datasets = self._datasets
        if filename not in datasets:
            dataset = gdal.Open(filename)
            if dataset is None:
                raise IOError('Cannot open %s' % filename)
            datasets[filename] = dataset
        return datasets[filename]

    def read(self, filename, rect):
        x0, y0, w, h = rect
        return self.open(filename).GetRasterBand(1).ReadAsArray(x0, y0, w, h)

    def close(self):
        self._local = threading.local()


class GeoTiffWriter(object):
    """ Write target bands tile by tile into a GeoTIFF file

    Parameters
    ----------
    filename : str
        output file
    bands : list of BandDescriptor
        target bands; virtual bands are stored as metadata expressions only
    width, height : int
        raster size
    gcp_source : str or None
        raster file to copy ground control points from

    """
    def __init__(self, filename, bands, width, height, gcp_source=None, options=GTIFF_OPTIONS):
        check_gdal()
        self.filename = filename
        self.bands = [band for band in bands if not band.is_virtual]
        if not self.bands:
            raise ValueError('No materialised bands to write')
        data_types = {gdal_array.NumericTypeCodeToGDALTypeCode(np.dtype(band.data_type).type)
                      for band in self.bands}
        data_type = data_types.pop() if len(data_types) == 1 else gdal.GDT_Float32
        driver = gdal.GetDriverByName('GTiff')
        self.dataset = driver.Create(filename, width, height, len(self.bands), data_type, list(options))
        if self.dataset is None:
            raise IOError('Cannot create %s' % filename)
        self.band_index = {}
        for i, band in enumerate(self.bands):
            raster_band = self.dataset.GetRasterBand(i + 1)
            raster_band.SetDescription(band.name)
            if band.unit:
                raster_band.SetUnitType(band.unit)
            if band.no_data_value_used:
                raster_band.SetNoDataValue(float(band.no_data_value))
                raster_band.Fill(float(band.no_data_value))
            self.band_index[band.name] = i + 1
        expressions = {band.name: band.expression for band in bands if band.is_virtual}
        if expressions:
            self.dataset.SetMetadata(expressions, 'VIRTUAL_BANDS')
        if gcp_source is not None:
            self.copy_gcps(gcp_source)

    def copy_gcps(self, filename):
        source = gdal.Open(filename)
        if source is None:
            logger.warning('Cannot open %s, no GCPs are copied', filename)
            return
        if source.GetGCPCount() > 0:
            self.dataset.SetGCPs(source.GetGCPs(), source.GetGCPProjection())
        source = None

    def write_tiles(self, rect, tiles):
        ''' Write {band name: 2D array} at the rectangle offset '''
        x0, y0 = rect[0], rect[1]
        for name, array in tiles.items():
            self.dataset.GetRasterBand(self.band_index[name]).WriteArray(array, x0, y0)

    def close(self):
        if self.dataset is not None:
            self.dataset.FlushCache()
            self.dataset = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
