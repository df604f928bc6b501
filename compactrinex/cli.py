'''
Command line programs: crx2rnx and rnx2crx.

A file name of `-' reads standard input and writes standard output.
'''

import logging
import sys
from datetime import datetime, timezone
from itertools import zip_longest
from optparse import OptionParser

from . import __ver__
from .crx import (HatanakaCompressor, HatanakaDecompressor, crx2rnx, rnx2crx,
                  PROGRAM)
from .errors import HatanakaError
from .header import CR_VER, RNX_VER
from .tracker import DATA_ORDER, CLOCK_ORDER

log = logging.getLogger(__name__)


def setup(opts):
    logging.basicConfig(level=logging.DEBUG if opts.verbose else logging.INFO,
                        format='%(name)s: %(levelname)s: %(message)s')


def parser(description, usage):
    parser = OptionParser(description=description, usage=usage)
    parser.add_option('-v', '--version', action='store_true',
                      help='Show version and quit')
    parser.add_option('-V', '--verbose', action='store_true',
                      help='Verbose operation')
    parser.add_option('-o', '--output', action='append',
                      help='File to write (once per input file; '
                           'default: by extension)')
    return parser


def version():
    print('compactrinex version', __ver__, 'supporting RINEX versions up to',
          RNX_VER, 'and Compact RINEX version', CR_VER, '.')


def run(convert, stream, args, outputs):
    '''Convert each file; return the exit status.'''
    for name, out in zip_longest(args, outputs or []):
        if name is None:
            break
        try:
            if name == '-':
                for line in stream(sys.stdin):
                    sys.stdout.write(line + '\n')
            else:
                convert(name, out)
        except (HatanakaError, UnicodeDecodeError, OSError) as err:
            log.error('%s: %s', name, err)
            return 1
    return 0


def crx2rnx_main(argv=None):
    '''Convert Compact RINEX observation files back to RINEX.'''
    p = parser(crx2rnx_main.__doc__,
               '%prog [-hvV] [-r STEP] <filename> ... [-o OUTPUT]')
    p.add_option('-r', '--rescale', type='int', metavar='STEP',
                 help='Shift values too wide for their field by multiples '
                      'of STEP (provisional; normally 1000000000)')
    (opts, args) = p.parse_args(argv)
    if opts.version:
        version()
        return 0
    if not args:
        p.error('Filename required.')
    setup(opts)
    return run(lambda name, out: crx2rnx(name, out, opts.rescale),
               lambda lines: HatanakaDecompressor(lines,
                                                  rescale_step=opts.rescale),
               args, opts.output)


def stamp(date, time):
    '''CRINEX PROG / DATE time from -d YYYY-MM-DD and -t HH:MM:SS.'''
    if date is None and time is None:
        return None
    if date is None:
        day = datetime.now(timezone.utc)
    else:
        day = datetime.strptime(date, '%Y-%m-%d')
    if time is None:
        return day.replace(hour=0, minute=0, second=0, microsecond=0)
    t = datetime.strptime(time, '%H:%M:%S')
    return day.replace(hour=t.hour, minute=t.minute, second=t.second,
                       microsecond=0)


def rnx2crx_main(argv=None):
    '''Compress RINEX observation files to Compact RINEX.'''
    p = parser(rnx2crx_main.__doc__,
               '%prog [-hvV] [-d DATE] [-t TIME] <filename> ... [-o OUTPUT]')
    p.add_option('--order', type='int', default=DATA_ORDER,
                 help='Difference order for observations (default %default)')
    p.add_option('--clock-order', type='int', default=CLOCK_ORDER,
                 help='Difference order for clock offsets (default %default)')
    p.add_option('-d', '--date', metavar='YYYY-MM-DD',
                 help='Date to put in CRINEX PROG / DATE (default: now)')
    p.add_option('-t', '--time', metavar='HH:MM:SS',
                 help='Time to put in CRINEX PROG / DATE')
    (opts, args) = p.parse_args(argv)
    if opts.version:
        version()
        return 0
    if not args:
        p.error('Filename required.')
    try:
        date = stamp(opts.date, opts.time)
    except ValueError as err:
        p.error(str(err))
    for order in (opts.order, opts.clock_order):
        if not 0 <= order <= 9:
            p.error('Difference orders must be between 0 and 9.')
    setup(opts)
    return run(lambda name, out: rnx2crx(name, out, opts.order,
                                         opts.clock_order, PROGRAM, date),
               lambda lines: HatanakaCompressor(lines, None, opts.order,
                                                opts.clock_order, PROGRAM,
                                                date),
               args, opts.output)


if __name__ == '__main__':
    sys.exit(crx2rnx_main())
