""" Reader of Sentinel-1 Level-1 GRD products in SAFE format """
import glob
import logging
import os
import threading
import zipfile
from xml.dom.minidom import parseString

from bs4 import BeautifulSoup
import numpy as np

from s1border.bands import AMPLITUDE, INTENSITY, BandDescriptor
from s1border.errors import ValidationError
from s1border.metadata import (
    ABS_CALIBRATION_FLAG,
    ACQUISITION_MODE,
    MISSION,
    NUM_OUTPUT_LINES,
    NUM_SAMPLES_PER_LINE,
    PROCESSING_SYSTEM_IDENTIFIER,
    PRODUCT,
    PRODUCT_TYPE,
    MetadataElement,
)
from s1border.raster import GdalTileReader
from s1border.utils import element_from_xml, get_DOM_attribute, get_DOM_text

logger = logging.getLogger(__name__)

MEASUREMENT_DATA_TYPE = 'uint16'
NO_DATA_VALUE = 0.0


def get_file_polarization(filename):
    ''' Polarization from annotation, noise, calibration or measurement file name

    e.g. noise-s1a-iw-grd-vv-20190101t054825-... gives VV

    '''
    basename = os.path.basename(filename)
    basename = basename[basename.index('s1'):]
    return basename.split('-')[3].upper()


class Sentinel1Product(object):
    """ Metadata, bands and pixel access of a Sentinel-1 GRD SAFE directory or zip file

    Parameters
    ----------
    filename : str
        path to S1?_??_GRD?_1S??_*.SAFE directory or *.zip file

    """
    def __init__(self, filename):
        self.filename = filename.rstrip(os.sep)
        self.name = os.path.basename(self.filename).split('.')[0]
        self.annotationXML = {}
        self.calibrationXML = {}
        self.noiseXML = {}
        self.measurement_files = {}
        self._tile_reader = None
        self._tile_reader_lock = threading.Lock()

        if zipfile.is_zipfile(self.filename):
            with zipfile.ZipFile(self.filename) as zf:
                filenames = zf.namelist()
                read = zf.read
                self._read_xml_files(filenames, read)
            self.measurement_files = {
                get_file_polarization(fn): '/vsizip/%s/%s' % (self.filename, fn)
                for fn in filenames if 'measurement/s1' in fn and fn.endswith('.tiff')}
        else:
            filenames = [os.path.relpath(fn, self.filename).replace(os.sep, '/')
                         for fn in glob.glob(os.path.join(self.filename, '**'), recursive=True)]
            def read(fn):
                with open(os.path.join(self.filename, fn), 'rb') as ff:
                    return ff.read()
            self._read_xml_files(filenames, read)
            self.measurement_files = {
                get_file_polarization(fn): os.path.join(self.filename, fn)
                for fn in filenames if 'measurement/s1' in fn and fn.endswith('.tiff')}

        if not self.annotationXML:
            raise ValidationError('No annotation files found in %s' % self.filename)
        self.pols = sorted(self.annotationXML)
        self.original_metadata = self.get_original_metadata()
        self.abstracted_metadata = self.get_abstracted_metadata()
        self.width = self.abstracted_metadata.get_attribute_int(NUM_SAMPLES_PER_LINE)
        self.height = self.abstracted_metadata.get_attribute_int(NUM_OUTPUT_LINES)
        self.bands = self.get_bands()

    def _read_xml_files(self, filenames, read):
        ''' Parse manifest, annotation, calibration and noise XML files '''
        manifest_files = [fn for fn in filenames if fn.endswith('manifest.safe')]
        if not manifest_files:
            raise ValidationError('No manifest.safe found in %s' % self.filename)
        self.manifestXML = parseString(read(manifest_files[0]))
        for fn in sorted(filenames):
            if not fn.endswith('.xml'):
                continue
            if 'annotation/s1' in fn:
                self.annotationXML[get_file_polarization(fn)] = (
                    fn, BeautifulSoup(read(fn), features="xml"))
            elif 'annotation/calibration/calibration-s1' in fn:
                self.calibrationXML[get_file_polarization(fn)] = (
                    fn, BeautifulSoup(read(fn), features="xml"))
            elif 'annotation/calibration/noise-s1' in fn:
                self.noiseXML[get_file_polarization(fn)] = (
                    fn, BeautifulSoup(read(fn), features="xml"))

    def get_original_metadata(self):
        ''' Metadata tree with one element per annotation, noise and calibration file '''
        orig_root = MetadataElement('Original_Product_Metadata')
        for name, xml_files in [('annotation', self.annotationXML),
                                ('noise', self.noiseXML),
                                ('calibration', self.calibrationXML)]:
            element = orig_root.add_element(MetadataElement(name))
            for pol in sorted(xml_files):
                fn, soup = xml_files[pol]
                dataset = element.add_element(MetadataElement(os.path.basename(fn)))
                dataset.add_element(element_from_xml(soup.find(True)))
        return orig_root

    def get_abstracted_metadata(self):
        ''' Mission, product and processor attributes from manifest and annotation '''
        annotation = self.original_metadata.get_element('annotation').get_elements()[0]
        product = annotation.get_element('product')
        ads_header = product.get_element('adsHeader')
        image_information = product.get_element_path(['imageAnnotation', 'imageInformation'])

        abs_root = MetadataElement('Abstracted_Metadata')
        abs_root.set_attribute(PRODUCT, self.name)
        abs_root.set_attribute(MISSION, '%s%s' % (
            get_DOM_text(self.manifestXML, ['safe:platform', 'safe:familyName']),
            get_DOM_text(self.manifestXML, ['safe:platform', 'safe:number'])))
        abs_root.set_attribute(PRODUCT_TYPE, ads_header.get_attribute_string('productType'))
        abs_root.set_attribute(ACQUISITION_MODE, ads_header.get_attribute_string('mode'))
        abs_root.set_attribute(PROCESSING_SYSTEM_IDENTIFIER, ' '.join([
            get_DOM_attribute(self.manifestXML, ['safe:software'], 'organisation'),
            get_DOM_attribute(self.manifestXML, ['safe:software'], 'name'),
            get_DOM_attribute(self.manifestXML, ['safe:software'], 'version'),
        ]))
        abs_root.set_attribute(ABS_CALIBRATION_FLAG, False)
        abs_root.set_attribute(NUM_SAMPLES_PER_LINE,
                               image_information.get_attribute_int('numberOfSamples'))
        abs_root.set_attribute(NUM_OUTPUT_LINES,
                               image_information.get_attribute_int('numberOfLines'))
        return abs_root

    def get_bands(self):
        ''' Amplitude band and virtual intensity band for each polarization '''
        bands = []
        for pol in self.pols:
            amplitude_name = 'Amplitude_%s' % pol
            bands.append(BandDescriptor(
                amplitude_name, MEASUREMENT_DATA_TYPE, self.width, self.height,
                unit=AMPLITUDE,
                no_data_value=NO_DATA_VALUE,
                no_data_value_used=True))
            bands.append(BandDescriptor(
                'Intensity_%s' % pol, 'float32', self.width, self.height,
                unit=INTENSITY,
                no_data_value=NO_DATA_VALUE,
                no_data_value_used=True,
                expression='%s * %s' % (amplitude_name, amplitude_name)))
        return bands

    def get_band(self, name):
        for band in self.bands:
            if band.name == name:
                return band
        raise KeyError('Band %s not found in %s' % (name, self.name))

    def get_calibration_vectors(self, polarisations, cal_type='dn'):
        """ Calibration vectors of requested type for each requested polarisation

        Returns
        -------
        calibration : list of (str, list of 1D numpy.array)
            polarisation and vectors ordered by azimuth line

        """
        calibration = []
        for dataset in self.original_metadata.get_element('calibration').get_elements():
            cal = dataset.get_element('calibration')
            pol = cal.get_element('adsHeader').get_attribute_string('polarisation')
            if pol not in polarisations:
                continue
            vector_list = cal.get_element('calibrationVectorList')
            vectors = [np.array(v.get_attribute_string(cal_type).split(), dtype=float)
                       for v in vector_list.get_elements()]
            calibration.append((pol, vectors))
        return calibration

    def get_measurement_file(self, band_name):
        band = self.get_band(band_name)
        if band.is_virtual:
            raise ValueError('Band %s is virtual (%s) and has no pixel data'
                             % (band.name, band.expression))
        pol = band_name.split('_')[-1]
        if pol not in self.measurement_files:
            raise IOError('No measurement file for %s in %s' % (pol, self.filename))
        return self.measurement_files[pol]

    def get_tile_reader(self):
        with self._tile_reader_lock:
            if self._tile_reader is None:
                self._tile_reader = GdalTileReader()
            return self._tile_reader

    def read_tile(self, band_name, rect):
        ''' Read (x0, y0, w, h) window of a band as 2D numpy.array '''
        return self.get_tile_reader().read(self.get_measurement_file(band_name), rect)

    def close(self):
        ''' Release raster datasets opened by read_tile '''
        with self._tile_reader_lock:
            if self._tile_reader is not None:
                self._tile_reader.close()
                self._tile_reader = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
