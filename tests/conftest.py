"""
Shared pytest fixtures: in-memory products and a synthetic SAFE directory
"""
import os

import numpy as np
import pytest

from s1border.bands import AMPLITUDE, INTENSITY, BandDescriptor
from s1border.metadata import (
    ABS_CALIBRATION_FLAG,
    ACQUISITION_MODE,
    MISSION,
    PROCESSING_SYSTEM_IDENTIFIER,
    PRODUCT,
    PRODUCT_TYPE,
    MetadataElement,
)

PRODUCT_NAME = 'S1A_IW_GRDH_1SDV_20190101T054825_20190101T054850_025289_02CC2E_1F4A'


def make_abs_root(mission='SENTINEL-1A', product_type='GRD', product=PRODUCT_NAME,
                  mode='IW', software='ESA Sentinel-1 IPF 002.91', calibrated=False):
    abs_root = MetadataElement('Abstracted_Metadata')
    abs_root.set_attribute(MISSION, mission)
    abs_root.set_attribute(PRODUCT_TYPE, product_type)
    abs_root.set_attribute(PRODUCT, product)
    abs_root.set_attribute(ACQUISITION_MODE, mode)
    abs_root.set_attribute(PROCESSING_SYSTEM_IDENTIFIER, software)
    abs_root.set_attribute(ABS_CALIBRATION_FLAG, calibrated)
    return abs_root


def make_noise_dataset(pol, vectors, list_name='noiseVectorList',
                       vector_name='noiseVector', lut_name='noiseLut'):
    """ One noise file element with given list of (pixels, noise) vectors """
    vector_list = MetadataElement(list_name, attributes={'count': str(len(vectors))})
    for line, (pixels, noise) in enumerate(vectors):
        vector_list.add_element(MetadataElement(vector_name, attributes={
            'azimuthTime': '2019-01-01T05:48:25.000000',
            'line': str(line * 100),
            'pixel': ' '.join(str(p) for p in pixels),
            lut_name: ' '.join(str(n) for n in noise),
        }))
    noise = MetadataElement('noise', elements=[
        MetadataElement('adsHeader', attributes={'polarisation': pol}),
        vector_list,
    ])
    return MetadataElement('noise-s1a-iw-grd-%s.xml' % pol.lower(), elements=[noise])


def make_orig_root(noise_datasets=(), thermal_noise_corrected=False):
    processing_information = MetadataElement('processingInformation', attributes={
        'thermalNoiseCorrectionPerformed': 'true' if thermal_noise_corrected else 'false'})
    product = MetadataElement('product', elements=[
        MetadataElement('imageAnnotation', elements=[processing_information])])
    orig_root = MetadataElement('Original_Product_Metadata')
    orig_root.add_element(MetadataElement('annotation', elements=[
        MetadataElement('s1a-iw-grd-vv.xml', elements=[product])]))
    orig_root.add_element(MetadataElement('noise', elements=list(noise_datasets)))
    return orig_root


class MemoryProduct(object):
    """ Product with whole band arrays kept in memory """
    def __init__(self, arrays, units=None, abs_root=None, orig_root=None,
                 dn_vectors=None, no_data_value=0.0):
        self.arrays = arrays
        self.height, self.width = list(arrays.values())[0].shape
        units = units or {}
        self.bands = [BandDescriptor(name, str(array.dtype), self.width, self.height,
                                     unit=units.get(name, AMPLITUDE),
                                     no_data_value=no_data_value,
                                     no_data_value_used=True)
                      for name, array in arrays.items()]
        self.abstracted_metadata = abs_root if abs_root is not None else make_abs_root()
        self.original_metadata = orig_root if orig_root is not None else make_orig_root(
            [make_noise_dataset('VV', [([0, 100, 200], [10., 20., 5.])])])
        self.dn_vectors = dn_vectors if dn_vectors is not None else {'VV': [[2.0, 2.1]]}
        self.requested_tiles = []

    def get_calibration_vectors(self, polarisations, cal_type='dn'):
        return [(pol, [np.array(v) for v in vectors])
                for pol, vectors in self.dn_vectors.items() if pol in polarisations]

    def read_tile(self, band_name, rect):
        x0, y0, w, h = rect
        self.requested_tiles.append((band_name, rect))
        return self.arrays[band_name][y0:y0 + h, x0:x0 + w].copy()


@pytest.fixture
def abs_root():
    return make_abs_root()


@pytest.fixture
def orig_root():
    return make_orig_root([
        make_noise_dataset('VH', [([0, 100], [1., 1.])]),
        make_noise_dataset('VV', [
            ([0, 50, 250], [1., 2., 3.]),
            ([0, 100, 200], [10., 20., 5.]),
            ([0, 60, 260], [4., 5., 6.]),
        ]),
    ])


@pytest.fixture
def memory_product():
    rng = np.random.RandomState(42)
    vv = rng.randint(0, 200, size=(60, 80)).astype(np.uint16)
    vh = rng.randint(0, 200, size=(60, 80)).astype(np.uint16)
    vv[:5, :5] = 0
    return MemoryProduct({'Amplitude_VH': vh, 'Amplitude_VV': vv})


MANIFEST = """<?xml version="1.0" encoding="UTF-8"?>
<xfdu:XFDU xmlns:xfdu="urn:ccsds:schema:xfdu:1" xmlns:safe="http://www.esa.int/safe/sentinel-1.0">
  <metadataSection>
    <metadataObject ID="platform">
      <metadataWrap><xmlData>
        <safe:platform>
          <safe:familyName>SENTINEL-1</safe:familyName>
          <safe:number>A</safe:number>
          <safe:instrument>
            <safe:familyName abbreviation="SAR">Synthetic Aperture Radar</safe:familyName>
          </safe:instrument>
        </safe:platform>
      </xmlData></metadataWrap>
    </metadataObject>
    <metadataObject ID="processing">
      <metadataWrap><xmlData>
        <safe:processing name="GRD Post Processing">
          <safe:facility name="Copernicus S1 Core Ground Segment">
            <safe:software name="Sentinel-1 IPF" organisation="ESA" version="{version}"/>
          </safe:facility>
        </safe:processing>
      </xmlData></metadataWrap>
    </metadataObject>
  </metadataSection>
</xfdu:XFDU>
"""

ANNOTATION = """<?xml version="1.0" encoding="UTF-8"?>
<product>
  <adsHeader>
    <missionId>S1A</missionId>
    <productType>GRD</productType>
    <polarisation>{pol}</polarisation>
    <mode>IW</mode>
    <swath>IW</swath>
  </adsHeader>
  <imageAnnotation>
    <imageInformation>
      <numberOfSamples>{width}</numberOfSamples>
      <numberOfLines>{height}</numberOfLines>
    </imageInformation>
    <processingInformation>
      <thermalNoiseCorrectionPerformed>{thermal}</thermalNoiseCorrectionPerformed>
    </processingInformation>
  </imageAnnotation>
</product>
"""

NOISE = """<?xml version="1.0" encoding="UTF-8"?>
<noise>
  <adsHeader>
    <missionId>S1A</missionId>
    <productType>GRD</productType>
    <polarisation>{pol}</polarisation>
  </adsHeader>
  <noiseRangeVectorList count="3">
    <noiseRangeVector>
      <azimuthTime>2019-01-01T05:48:25.000000</azimuthTime>
      <line>0</line>
      <pixel count="3">0 40 79</pixel>
      <noiseRangeLut count="3">1.0 1.0 1.0</noiseRangeLut>
    </noiseRangeVector>
    <noiseRangeVector>
      <azimuthTime>2019-01-01T05:48:35.000000</azimuthTime>
      <line>30</line>
      <pixel count="3">0 40 80</pixel>
      <noiseRangeLut count="3">{noise}</noiseRangeLut>
    </noiseRangeVector>
    <noiseRangeVector>
      <azimuthTime>2019-01-01T05:48:45.000000</azimuthTime>
      <line>59</line>
      <pixel count="3">0 40 79</pixel>
      <noiseRangeLut count="3">1.0 1.0 1.0</noiseRangeLut>
    </noiseRangeVector>
  </noiseRangeVectorList>
</noise>
"""

CALIBRATION = """<?xml version="1.0" encoding="UTF-8"?>
<calibration>
  <adsHeader>
    <polarisation>{pol}</polarisation>
  </adsHeader>
  <calibrationVectorList count="2">
    <calibrationVector>
      <azimuthTime>2019-01-01T05:48:25.000000</azimuthTime>
      <line>0</line>
      <pixel count="2">0 79</pixel>
      <sigmaNought count="2">500.0 520.0</sigmaNought>
      <dn count="2">{dn0} 3.5</dn>
    </calibrationVector>
    <calibrationVector>
      <azimuthTime>2019-01-01T05:48:45.000000</azimuthTime>
      <line>59</line>
      <pixel count="2">0 79</pixel>
      <sigmaNought count="2">501.0 521.0</sigmaNought>
      <dn count="2">9.0 9.5</dn>
    </calibrationVector>
  </calibrationVectorList>
</calibration>
"""


def write_safe(directory, pols=('VH', 'VV'), width=80, height=60, version='002.91',
               thermal='false', noise='100.0 200.0 300.0', dn0='2.0'):
    """ Write manifest and annotation files of a small GRD product """
    safe_dir = os.path.join(str(directory), PRODUCT_NAME + '.SAFE')
    os.makedirs(os.path.join(safe_dir, 'annotation', 'calibration'))
    os.makedirs(os.path.join(safe_dir, 'measurement'))
    with open(os.path.join(safe_dir, 'manifest.safe'), 'w') as f:
        f.write(MANIFEST.format(version=version))
    for i, pol in enumerate(pols):
        base = 's1a-iw-grd-%s-20190101t054825-20190101t054850-025289-02cc2e-%03d' % (pol.lower(), i + 1)
        with open(os.path.join(safe_dir, 'annotation', base + '.xml'), 'w') as f:
            f.write(ANNOTATION.format(pol=pol, width=width, height=height, thermal=thermal))
        with open(os.path.join(safe_dir, 'annotation', 'calibration', 'noise-' + base + '.xml'), 'w') as f:
            f.write(NOISE.format(pol=pol, noise=noise))
        with open(os.path.join(safe_dir, 'annotation', 'calibration', 'calibration-' + base + '.xml'), 'w') as f:
            f.write(CALIBRATION.format(pol=pol, dn0=dn0))
    return safe_dir


@pytest.fixture
def safe_dir(tmp_path):
    return write_safe(tmp_path)
