#!/usr/bin/env python
import sys
import argparse
import logging

from s1border import BorderNoiseRemoval, Sentinel1Product
from s1border.processor import BORDER_LIMIT, TRIM_THRESHOLD
from s1border.raster import TILE_SIZE, GeoTiffWriter

def parse_args(args):
    ''' parse input arguments '''
    parser = argparse.ArgumentParser(
        description="Remove border noise from Sentinel-1 IW/EW Level-1 GRD products")
    parser.add_argument('ifile', type=str, help='Input Sentinel-1 file in SAFE or zip format')
    parser.add_argument('ofile', type=str, help='Output GeoTIFF file')
    parser.add_argument('-p', '--polarisations', nargs='+', default=None,
                        choices=['HH', 'HV', 'VV', 'VH'],
                        help='Process bands in these polarisations (default: all)')
    parser.add_argument('-b', '--border-limit', type=int, default=BORDER_LIMIT,
                        help='Border margin limit [pixels]')
    parser.add_argument('-t', '--trim-threshold', type=float, default=TRIM_THRESHOLD,
                        help='Threshold of denoised amplitude')
    parser.add_argument('-s', '--tile-size', type=int, default=TILE_SIZE,
                        help='Size of processed tiles [pixels]')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print debug messages')
    return parser.parse_args(args)

def run_border_noise_removal(ifile, ofile, polarisations=None, border_limit=BORDER_LIMIT,
                             trim_threshold=TRIM_THRESHOLD, tile_size=TILE_SIZE):
    """ Remove border noise from <ifile> and export corrected bands to GeoTIFF <ofile> """
    with Sentinel1Product(ifile) as product:
        op = BorderNoiseRemoval(product,
                                selected_polarisations=polarisations,
                                border_limit=border_limit,
                                trim_threshold=trim_threshold)
        context = op.initialize()
        print('Remove border noise from %s using %s band' % (product.name, context.co_pol_band.name))
        gcp_source = product.get_measurement_file(context.co_pol_band.name)
        with GeoTiffWriter(ofile, context.target_bands, context.width, context.height,
                           gcp_source=gcp_source) as writer:
            op.run(writer, tile_size=tile_size)
    print('Saved %s' % ofile)

if __name__ == '__main__':
    args = parse_args(sys.argv[1:])
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')
    run_border_noise_removal(args.ifile, args.ofile,
                             polarisations=args.polarisations,
                             border_limit=args.border_limit,
                             trim_threshold=args.trim_threshold,
                             tile_size=args.tile_size)
