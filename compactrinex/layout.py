'''
Fixed-width layout of RINEX observation records.

The layout is configuration handed to the codec by whoever read the header:
the RINEX version and the observation types (one list for RINEX 2, a list per
satellite system for RINEX 3 and later).  Everything about columns lives here;
the difference codecs only see scaled integers and text.

RINEX 2 epoch line:
     21  1  1  0  0  0.0000000  0 14G01G02G03G05G06G07G09G12G17G19G23G25  -0.123456789
                                    G28G30
with observations F14.3 plus LLI and signal strength characters, five to a
line.  RINEX 3:
    > 2021 01 01 00 00  0.0000000  0 14       -0.123456789012
    G01  23619095.450 7 124123141.42518 ...
with all of a satellite's observations on one line after its identifier.
'''

from collections import namedtuple
from warnings import warn

from .diffcodec import scale, fixed
from .errors import RinexFormatError, UnsupportedEventError

# Field kinds: fixed-point numbers, literal text, single flag characters.
NUMERIC = 'numeric'
TEXT = 'text'
FLAG = 'flag'
KINDS = (NUMERIC, TEXT, FLAG)

FieldSpec = namedtuple('FieldSpec', ['kind', 'width', 'decimals'])

OBSERVATION = FieldSpec(NUMERIC, 14, 3)
INDICATOR = FieldSpec(FLAG, 1, 0)
SLOT_WIDTH = OBSERVATION.width + 2 * INDICATOR.width

# Provisional: nominal shift (in field units) for decoded values too wide for
# their field.  Only applied when a caller asks for it.
RESCALE_STEP = 10 ** 9

EpochDescriptor = namedtuple('EpochDescriptor',
                             ['flag', 'epoch', 'count', 'satellites', 'clock',
                              'text'])

FieldSlot = namedtuple('FieldSlot', ['value', 'lli', 'ssi'])
FieldSlot.__new__.__defaults__ = (' ', ' ')


def rescale(scaled, spec, step=RESCALE_STEP):
    '''Shift scaled toward zero by multiples of step until it fits spec.width.

    Raises RinexFormatError if no such shift exists.
    '''
    unit = step * 10 ** spec.decimals
    value = scaled
    while len(fixed(value, spec.decimals)) > spec.width:
        if abs(value) < unit:
            raise RinexFormatError('Value %s does not fit F%d.%d'
                                   % (fixed(scaled, spec.decimals), spec.width,
                                      spec.decimals))
        value -= unit if value > 0 else -unit
    return value


def format_value(scaled, spec, rescale_step=None):
    '''Right-justify a scaled integer in its fixed-width field.'''
    if scaled is None:
        return ' ' * spec.width
    text = fixed(scaled, spec.decimals)
    if len(text) > spec.width:
        if rescale_step is None:
            raise RinexFormatError('Value %s does not fit F%d.%d'
                                   % (text, spec.width, spec.decimals))
        adjusted = rescale(scaled, spec, rescale_step)
        warn('Value %s too wide for F%d.%d; rescaled to %s'
             % (text, spec.width, spec.decimals,
                fixed(adjusted, spec.decimals)))
        text = fixed(adjusted, spec.decimals)
    return text.rjust(spec.width)


class ObservationLayout(object):
    '''
    Column layout of a RINEX observation file of a given version.

    observables: a list of observation codes (RINEX 2, or the same for all
    systems), or a dictionary of lists keyed by satellite system letter.
    line_width / fields_per_line only matter for RINEX 2, where observations
    wrap onto continuation lines.
    '''
    def __init__(self, version, observables, line_width=None,
                 fields_per_line=None):
        self.version = str(version).strip()
        try:
            self.major = int(self.version.split('.')[0])
        except ValueError:
            raise RinexFormatError('RINEX version not parsable: '
                                   + repr(self.version))
        if isinstance(observables, dict):
            self.observables = dict((k, list(v)) for k, v in observables.items())
        else:
            self.observables = {None: list(observables)}
        self._tables = {}
        if self.major == 2:
            self.line_width = line_width or 80
            self.fields_per_line = fields_per_line or \
                self.line_width // SLOT_WIDTH
            if self.fields_per_line < 1:
                raise ValueError('Line too narrow for an observation')
            self.sats_per_line = 12
            self.head = 32
            self.flagcol = 28
            self.countcols = (29, 32)
            self.clockcol = 68
            self.clock = FieldSpec(NUMERIC, 12, 9)
            self.crx_version = '1.0'
            self.marker = '&'
        elif self.major in (3, 4):
            self.line_width = line_width
            self.fields_per_line = fields_per_line
            self.sats_per_line = None
            self.head = 41
            self.flagcol = 31
            self.countcols = (32, 35)
            self.clockcol = 41
            self.clock = FieldSpec(NUMERIC, 15, 12)
            self.crx_version = '3.0'
            self.marker = '>'
        else:
            raise RinexFormatError('RINEX version %s not supported'
                                   % self.version)

    def __repr__(self):
        return 'ObservationLayout(%r, %r)' % (self.version, self.observables)

    def codes(self, prn):
        '''Observation codes recorded for satellite prn.'''
        if prn[:1] in self.observables:
            return self.observables[prn[:1]]
        if None in self.observables:
            return self.observables[None]
        raise RinexFormatError('No observation types for satellite system',
                               satellite=prn)

    def table(self, prn):
        '''Field table (code, spec) pairs for prn's system, resolved once.'''
        key = prn[:1] if prn[:1] in self.observables else None
        if key not in self._tables:
            self._tables[key] = tuple((code, OBSERVATION)
                                      for code in self.codes(prn))
        return self._tables[key]

    def flags(self, prn):
        '''Field spec of the LLI / signal strength string of prn's records.

        The indicators of all observables, two per slot, make up one text
        field, which is what the compact data line carries a diff of.
        '''
        return FieldSpec(TEXT, 2 * INDICATOR.width * len(self.codes(prn)), 0)

    def data_line_count(self, prn):
        if self.major == 2:
            nobs = len(self.codes(prn))
            return -(-nobs // self.fields_per_line)
        return 1

    # Epoch descriptors

    def flag(self, text):
        '''The event flag of an epoch line.'''
        c = text[self.flagcol:self.flagcol + 1]
        if not c.isdigit():
            raise UnsupportedEventError('Epoch flag %r not recognized' % c)
        flag = int(c)
        if flag > 6:
            raise UnsupportedEventError('Epoch flag %d not recognized' % flag)
        return flag

    def count(self, text):
        '''Number of satellites (or of special records) of an epoch line.'''
        s = text[self.countcols[0]:self.countcols[1]].strip()
        if not s:
            return 0
        if not s.isdigit():
            raise RinexFormatError('Bad satellite count ' + repr(s))
        return int(s)

    def epochtime(self, text):
        if self.major == 2:
            return text[1:26]
        return text[2:29]

    def descriptor(self, text, clock=None):
        '''Build an EpochDescriptor from a (compact form) epoch line.

        For ordinary epochs the satellite identifiers follow the fixed part
        of the line, three characters each.
        '''
        flag = self.flag(text)
        count = self.count(text)
        satellites = ()
        if flag < 2:
            end = self.head + 3 * count
            if count and len(text.rstrip()) < end:
                raise RinexFormatError('Epoch line lists fewer than %d '
                                       'satellites' % count)
            satellites = tuple(text[k:k + 3] for k in range(self.head, end, 3))
        return EpochDescriptor(flag, self.epochtime(text), count, satellites,
                               clock, text)

    def epoch_lines(self, descriptor, rescale_step=None):
        '''Plain RINEX lines for an epoch descriptor.'''
        if descriptor.flag > 1:
            return [descriptor.text.rstrip()]
        head = descriptor.text[:self.head].ljust(self.head)
        sats = list(descriptor.satellites)
        if self.major == 2:
            n = self.sats_per_line
            first = head + ''.join(sats[:n])
            if descriptor.clock is not None:
                first = first.ljust(self.clockcol) + \
                    format_value(descriptor.clock, self.clock, rescale_step)
            lines = [first.rstrip()]
            for k in range(n, len(sats), n):
                lines.append(' ' * self.head + ''.join(sats[k:k + n]))
            return lines
        if descriptor.clock is not None:
            head += format_value(descriptor.clock, self.clock, rescale_step)
        return [head.rstrip()]

    # Observation data

    def slots_lines(self, prn, slots, rescale_step=None):
        '''Plain RINEX line(s) holding one satellite's observations.'''
        fields = [format_value(slot.value, spec, rescale_step)
                  + slot.lli + slot.ssi
                  for (code, spec), slot in zip(self.table(prn), slots)]
        if self.major == 2:
            n = self.fields_per_line
            return [''.join(fields[k:k + n]).rstrip()
                    for k in range(0, len(fields), n)]
        return [(prn + ''.join(fields)).rstrip()]

    def read_slots(self, prn, lines):
        '''Parse one satellite's observation line(s) into FieldSlots.'''
        codes = self.codes(prn)
        if self.major == 2:
            n = self.fields_per_line
            chunks = []
            for k, line in enumerate(lines):
                width = SLOT_WIDTH * min(n, len(codes) - k * n)
                if line[width:].strip():
                    raise RinexFormatError('Unexpected content after '
                                           'observations: ' + repr(line),
                                           satellite=prn)
                chunks.append(line[:width].ljust(width))
            text = ''.join(chunks)
        else:
            line = lines[0]
            if line[:3] != prn:
                raise RinexFormatError('Expected data for %s, got %r'
                                       % (prn, line[:3]), satellite=prn)
            width = SLOT_WIDTH * len(codes)
            if line[3 + width:].strip():
                raise RinexFormatError('Unexpected content after '
                                       'observations: ' + repr(line),
                                       satellite=prn)
            text = line[3:3 + width].ljust(width)
        slots = []
        for j, (code, spec) in enumerate(self.table(prn)):
            field = text[j * SLOT_WIDTH:(j + 1) * SLOT_WIDTH]
            try:
                value = scale(field[:spec.width], spec.decimals)
            except RinexFormatError as err:
                raise err.locate(satellite=prn, observable=code)
            lli = field[spec.width:spec.width + INDICATOR.width]
            ssi = field[spec.width + INDICATOR.width:
                        spec.width + 2 * INDICATOR.width]
            slots.append(FieldSlot(value, lli, ssi))
        return slots

    def read_epoch(self, first, pull):
        '''Read an ordinary epoch block of a plain RINEX file.

        first is the epoch line, pull() returns the following lines.
        Returns (compact epoch text, clock, [(prn, slots), ...]).
        '''
        count = self.count(first)
        records = []
        if self.major == 2:
            n = self.sats_per_line
            if len(first) < self.head:
                raise RinexFormatError('Epoch line too short: ' + repr(first))
            line = first
            sats = []
            for k in range(0, count, n):
                if k:
                    line = pull()
                    if line[:self.head].strip():
                        raise RinexFormatError('Bad satellite continuation '
                                               'line: ' + repr(line))
                m = min(n, count - k)
                end = self.head + 3 * m
                if len(line) < end:
                    raise RinexFormatError('Epoch line lists fewer than %d '
                                           'satellites' % count)
                sats.extend(line[j:j + 3] for j in range(self.head, end, 3))
                tail = line[end:self.clockcol] if not k else line[end:]
                if tail.strip():
                    raise RinexFormatError('Unexpected epoch line content: '
                                           + repr(line))
            clock = scale(first[self.clockcol:self.clockcol + self.clock.width],
                          self.clock.decimals)
            if first[self.clockcol + self.clock.width:].strip():
                raise RinexFormatError('Unexpected epoch line content: '
                                       + repr(first))
            for prn in sats:
                lines = [pull() for k in range(self.data_line_count(prn))]
                records.append((prn, self.read_slots(prn, lines)))
        else:
            clock = scale(first[self.clockcol:self.clockcol + self.clock.width],
                          self.clock.decimals)
            if first[self.clockcol + self.clock.width:].strip():
                raise RinexFormatError('Unexpected epoch line content: '
                                       + repr(first))
            for k in range(count):
                line = pull()
                prn = line[:3]
                records.append((prn, self.read_slots(prn, [line])))
            sats = [prn for prn, slots in records]
        text = first[:self.head].ljust(self.head) + ''.join(sats)
        return text, clock, records
