'''
Convert RINEX observation files to Compact RINEX (Hatanaka) and back.

HatanakaCompressor and HatanakaDecompressor wrap any iterable of lines (a
file, a list, a generator) and are themselves iterables of lines, without
line terminators.  rnx2crx() and crx2rnx() do the same for files on disk.

Compact RINEX 1.0 goes with RINEX 2, and 3.0 with RINEX 3 and 4.
'''

import logging
import os
import re
from os import path, access, W_OK
from tempfile import mkstemp

from . import __ver__
from .errors import RinexFormatError
from .header import (read_header, scan, layout as header_layout, label,
                     crinex_lines, CRX_LABEL, CRX_PROG_LABEL)
from .layout import ObservationLayout
from .tracker import EpochStateTracker, DATA_ORDER, CLOCK_ORDER
from .utility import fileread, ENCODING

log = logging.getLogger(__name__)

PROGRAM = 'compactrinex ' + __ver__


def stripped(lines):
    return (line.rstrip('\r\n') for line in lines)


class _Converter(object):
    '''Common parts: header scanning, and redefinitions in special events.'''
    def __init__(self, lines, layout=None):
        self.lines = lines
        self.layout = layout
        self.meta = None

    def configure(self, header):
        self.meta = scan(header)
        if self.layout is None:
            self.layout = header_layout(self.meta)
        log.debug('Header read: RINEX %s, observation types %r',
                  self.layout.version, self.layout.observables)
        return self.layout

    def redefine(self, block):
        '''New layout if block redefines the observation types, else None.'''
        before = self.meta.get('obscodes')
        scan(block, self.meta)
        if self.meta.get('obscodes') == before:
            return None
        log.debug('Observation types redefined in header block %d: %r',
                  self.meta.numblocks, self.meta['obscodes'])
        return ObservationLayout(self.layout.version, self.meta['obscodes'],
                                 self.layout.line_width,
                                 self.layout.fields_per_line)


class HatanakaDecompressor(_Converter):
    '''
    Iterate over the RINEX lines of a Compact RINEX line source.

    layout, if given, overrides the one read from the header.
    rescale_step enables the provisional rescaling of decoded values
    that overflow their field (see layout.rescale).
    '''
    def __init__(self, lines, layout=None, rescale_step=None):
        _Converter.__init__(self, lines, layout)
        self.rescale_step = rescale_step
        self.tracker = None

    def __iter__(self):
        lines = stripped(self.lines)
        header = read_header(lines)
        if len(header) < 2 or label(header[0]) != CRX_LABEL or \
                label(header[1]) != CRX_PROG_LABEL:
            raise RinexFormatError('Not a Compact RINEX file')
        layout = self.configure(header)
        if self.meta['crnxver'] != layout.crx_version:
            raise RinexFormatError('CRINEX version %s does not go with RINEX %s'
                                   % (self.meta['crnxver'], layout.version))
        self.tracker = EpochStateTracker(layout,
                                         rescale_step=self.rescale_step,
                                         redefine=self.redefine)
        for line in header[2:]:
            yield line
        for line in lines:
            for out in self.tracker.decompress(line, lines):
                yield out


class HatanakaCompressor(_Converter):
    '''
    Iterate over the Compact RINEX lines of a RINEX observation line source.

    order and clock_order are the difference orders for observations and
    the receiver clock offset; program and date go in CRINEX PROG / DATE.
    '''
    def __init__(self, lines, layout=None, order=DATA_ORDER,
                 clock_order=CLOCK_ORDER, program=PROGRAM, date=None):
        _Converter.__init__(self, lines, layout)
        self.order = order
        self.clock_order = clock_order
        self.program = program
        self.date = date
        self.tracker = None

    def __iter__(self):
        lines = stripped(self.lines)
        header = read_header(lines)
        if label(header[0]) == CRX_LABEL:
            raise RinexFormatError('File is already Compact RINEX')
        layout = self.configure(header)
        self.tracker = EpochStateTracker(layout, self.order, self.clock_order,
                                         redefine=self.redefine)
        for line in crinex_lines(layout.crx_version, self.program, self.date):
            yield line
        for line in header:
            yield line
        for line in lines:
            for out in self.tracker.compress(line, lines):
                yield out


def decompress(lines, **kwargs):
    '''List of RINEX lines from Compact RINEX lines.'''
    return list(HatanakaDecompressor(lines, **kwargs))


def compress(lines, **kwargs):
    '''List of Compact RINEX lines from RINEX lines.'''
    return list(HatanakaCompressor(lines, **kwargs))


def rnxname(name):
    '''RINEX file name for a Compact RINEX file: .yyd -> .yyo, .crx -> .rnx'''
    if re.search(r'\.\d\d[dD]$', name):
        return name[:-1] + ('o' if name[-1] == 'd' else 'O')
    if name.endswith(('.crx', '.CRX')):
        return name[:-3] + ('rnx' if name[-3:] == 'crx' else 'RNX')
    return name + '.rnx'


def crxname(name):
    '''Compact RINEX file name for a RINEX file: .yyo -> .yyd, .rnx -> .crx'''
    if re.search(r'\.\d\d[oO]$', name):
        return name[:-1] + ('d' if name[-1] == 'o' else 'D')
    if name.endswith(('.rnx', '.RNX')):
        return name[:-3] + ('crx' if name[-3:] == 'rnx' else 'CRX')
    return name + '.crx'


def opentarget(newfile, force=False):
    '''
    Open newfile for writing; return (file, name).

    Unless force is set, fall back to the current directory if that file
    exists or its directory is unwritable, and then to a temporary file.
    '''
    if force:
        return open(newfile, 'w', encoding=ENCODING), newfile
    dir = path.dirname(path.abspath(newfile))
    if path.lexists(newfile) or not access(dir, W_OK):
        newfile = path.basename(newfile)
    if path.lexists(newfile) or not access(path.curdir, W_OK):
        (ofid, newfile) = mkstemp(suffix=path.splitext(newfile)[1])
        return os.fdopen(ofid, 'w', encoding=ENCODING), newfile
    return open(newfile, 'w', encoding=ENCODING), newfile


def convert(converter, fid, output, force):
    '''Write all lines of converter to output; remove it if anything fails.'''
    ofid, newfile = opentarget(output, force)
    try:
        with ofid:
            for line in converter:
                ofid.write(line + '\n')
    except Exception:
        log.error('Conversion of %s failed at line %d',
                  fid.name or '<input>', fid.lineno)
        os.remove(newfile)
        raise
    return newfile


def crx2rnx(fid, output=None, rescale_step=None, layout=None):
    '''
    Convert a Compact RINEX observation file back to standard RINEX,
    writing file `output', or (with extension changed from .yyd to .yyo,
    or .crx to .rnx) to the same directory as the source file, or (if that
    file exists or is unwritable) to the current directory, or to a
    temporary file.  Returns the name of the file written.
    '''
    with fileread(fid) as src:
        target = output or rnxname(src.name or 'stdin.crx')
        newfile = convert(HatanakaDecompressor(src, layout, rescale_step),
                          src, target, output is not None)
    log.info('%s decompressed to %s', src.name, newfile)
    return newfile


def rnx2crx(fid, output=None, order=DATA_ORDER, clock_order=CLOCK_ORDER,
            program=PROGRAM, date=None, layout=None):
    '''
    Convert a RINEX observation file to Compact RINEX, writing file
    `output', or (with extension changed from .yyo to .yyd, or .rnx to
    .crx) next to the source file, in the current directory, or in a
    temporary file, as for crx2rnx.  Returns the name of the file written.
    '''
    with fileread(fid) as src:
        target = output or crxname(src.name or 'stdin.rnx')
        newfile = convert(HatanakaCompressor(src, layout, order, clock_order,
                                             program, date),
                          src, target, output is not None)
    log.info('%s compressed to %s', src.name, newfile)
    return newfile
