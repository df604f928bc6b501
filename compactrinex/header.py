'''
Just enough of the RINEX observation header to configure the codec.

The header itself passes through conversion untouched; here we only pick out
the RINEX version, the observation types, and the two extra lines Compact
RINEX puts in front of the header.
'''

from datetime import datetime, timezone
from warnings import warn

from .errors import RinexFormatError
from .layout import ObservationLayout
from .utility import metadict

RNX_VER = '4.02'
CR_VER = '3.0'
# Most recent minor version known, by major version.
KNOWN_MINOR = {2: 11, 3: 5, 4: 2}

CRX_LABEL = 'CRINEX VERS   / TYPE'
CRX_PROG_LABEL = 'CRINEX PROG / DATE'
END_LABEL = 'END OF HEADER'

MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
          'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def label(line):
    return line[60:80].strip()


def versioncheck(ver):
    '''
    Given RINEX format version ver, verify that this program can handle it.
    '''
    nums = ver.strip().split('.')
    if not 0 < len(nums) < 3 or not all(n.isdigit() for n in nums):
        raise RinexFormatError('RINEX Version not parsable: ' + repr(ver))
    major = int(nums[0])
    if major not in KNOWN_MINOR:
        raise RinexFormatError('RINEX version ' + ver.strip() +
                               ' unsupported')
    elif len(nums) > 1 and int(nums[1]) > KNOWN_MINOR[major]:
        warn('RINEX minor version more recent than program.')
    return ver.strip()


def crxcheck(ver):
    '''Check whether Compact RINEX version is known to this program.'''
    if ver.strip() not in ('1.0', '3.0'):
        raise RinexFormatError('CRINEX version ' + ver.strip() +
                               ' not supported.')
    return ver.strip()


def iso(c):
    '''Ensure that the character c is `O' (for RINEX observation data.)'''
    if c.upper() != 'O':
        raise RinexFormatError('RINEX File is not observation data')
    return c.upper()


class obscode(object):
    '''
    Parse RINEX 2 # / TYPES OF OBSERV headers, specifying observation types.

    These header list observation codes which will be listed in this file.
    Continuation lines are necessary for more than 9 observation types.
    It is possible to redefine this list in the course of a file.
    '''
    # There must be `numtypes' many observation codes, possibly over several
    # lines.  Continuation lines have blank `numtypes'.
    def __init__(self):
        self.numtypes = None

    def __call__(self, s):
        nt = s[0:6].strip()
        if self.numtypes is not None and not nt:  # continuation line
            if len(self.obstypes) >= self.numtypes:
                raise RinexFormatError('Observation code headers seem broken.')
        elif nt.isdigit():
            self.numtypes = int(nt)
            self.obstypes = []
        else:
            raise RinexFormatError('Observation type code continuation header '
                                   'without beginning!')
        for ot in range(min(self.numtypes - len(self.obstypes), 9)):
            self.obstypes.append(s[6 * ot + 10: 6 * ot + 12])
        return self.obstypes[:]


class sysobscode(object):
    '''
    Parse RINEX 3 SYS / # / OBS TYPES headers: observation types by system.

    Thirteen codes fit on a line; continuation lines leave the system and
    count blank.  Systems not mentioned keep the types they had before.
    '''
    def __init__(self, previous=None):
        self.codes = dict(previous or {})
        self.system = None

    def __call__(self, s):
        system = s[0:1].strip()
        nt = s[3:6].strip()
        if system:
            if not nt.isdigit():
                raise RinexFormatError('Bad observation type count for system '
                                       + system)
            self.system = system
            self.numtypes = int(nt)
            self.codes[system] = []
        elif self.system is None:
            raise RinexFormatError('Observation type code continuation header '
                                   'without beginning!')
        obstypes = self.codes[self.system]
        if len(obstypes) >= self.numtypes:
            raise RinexFormatError('Observation code headers seem broken.')
        for ot in range(min(self.numtypes - len(obstypes), 13)):
            obstypes.append(s[4 * ot + 7: 4 * ot + 10])
        return dict((k, v[:]) for k, v in self.codes.items())


class field(object):
    '''
    Describes a value in a RINEX header: variable name, position in the
    line, and how to interpret it.
    '''
    def __init__(self, name, start, stop, convert=str.strip):
        self.name = name
        self.start = start
        self.stop = stop
        self.convert = convert

    def read(self, line):
        return self.convert(line[self.start:self.stop])


def headers(meta):
    '''The header lines we understand, with fresh continuation state.'''
    previous = meta.get('obscodes')
    if not isinstance(previous, dict):
        previous = None
    return {
        CRX_LABEL: (field('crnxver', 0, 20, crxcheck),),
        CRX_PROG_LABEL: (field('crnxprog', 0, 20),
                         field('crxdate', 40, 60)),
        'RINEX VERSION / TYPE': (field('rnxver', 0, 9, versioncheck),
                                 field('filetype', 20, 21, iso),
                                 field('satsystem', 40, 41)),
        '# / TYPES OF OBSERV': (field('obscodes', 0, 60, obscode()),),
        'SYS / # / OBS TYPES': (field('obscodes', 0, 60,
                                      sysobscode(previous)),),
    }


def scan(lines, meta=None):
    '''Record the header values we need from lines into meta (a metadict).

    Used for the file header, and again for header lines which arrive in
    special event records.
    '''
    if meta is None:
        meta = metadict()
    meta.numblocks += 1
    table = headers(meta)
    for line in lines:
        lbl = label(line)
        if lbl not in table:
            for known in table:
                if lbl.replace(' ', '') == known.replace(' ', ''):
                    warn('Label ' + lbl + ' recognized as ' + known +
                         ' despite incorrect whitespace.')
                    lbl = known
                    break
        for fld in table.get(lbl, ()):
            meta[fld.name] = fld.read(line.ljust(80))
    return meta


def read_header(lines):
    '''Take lines from the iterator lines up to and including END OF HEADER.'''
    header = []
    for line in lines:
        header.append(line)
        if label(line) == END_LABEL:
            return header
    raise RinexFormatError('File ends before END OF HEADER')


def layout(meta):
    '''The ObservationLayout described by header values.'''
    if 'rnxver' not in meta:
        raise RinexFormatError('No RINEX VERSION / TYPE header')
    if 'obscodes' not in meta:
        raise RinexFormatError('No observation types in header')
    return ObservationLayout(meta['rnxver'], meta['obscodes'])


def crxdate(date=None):
    '''Format a date as in CRINEX PROG / DATE, e.g. 28-Dec-21 00:00'''
    if date is None:
        date = datetime.now(timezone.utc)
    return '%02d-%s-%02d %02d:%02d' % (date.day, MONTHS[date.month - 1],
                                       date.year % 100, date.hour, date.minute)


def crinex_lines(version, program, date=None):
    '''The two header lines which mark a file as Compact RINEX.'''
    return ['%-20s%-40s%-20s' % (version, 'COMPACT RINEX FORMAT', CRX_LABEL),
            '%-20.20s%-20s%-20s%-20s' % (program, '', crxdate(date),
                                         CRX_PROG_LABEL)]
