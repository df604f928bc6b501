'''
Per-file state of a Compact RINEX conversion.

An EpochStateTracker belongs to exactly one compression or decompression pass.
It holds a DifferenceState for every (satellite, observable) pair seen so far,
one for the receiver clock offset, the last epoch line, and the last LLI /
signal strength flags of every satellite.  Compression and decompression walk
the same states through the same codecs, so what one writes the other reads.
'''

import logging

from .diffcodec import (DifferenceState, NumericDifferenceCodec, parse_token,
                        format_token)
from .errors import (HatanakaError, RinexFormatError, DecodeStateError,
                     UnsupportedEventError)
from .layout import FieldSlot, NUMERIC, KINDS
from .textdiff import TextLineDiffCodec

log = logging.getLogger(__name__)

DATA_ORDER = 3
CLOCK_ORDER = 2


def pull(lines):
    '''Return a function taking the next line of an epoch block.'''
    def nextline():
        line = next(lines, None)
        if line is None:
            raise RinexFormatError('File ends in the middle of an epoch')
        return line
    return nextline


class EpochStateTracker(object):
    '''
    Carry difference state from epoch to epoch.

    layout is the ObservationLayout of the file (and may be replaced when a
    special event redefines the observation types).  order and clock_order
    are the difference orders used when compressing; when decompressing the
    orders are whatever the file announces.  rescale_step enables the
    provisional rescaling of decoded values too wide for their field.
    redefine, if given, is called with the lines of each special event
    block and may return a new layout for the epochs which follow.
    '''
    def __init__(self, layout, order=DATA_ORDER, clock_order=CLOCK_ORDER,
                 rescale_step=None, redefine=None):
        self.layout = layout
        self.redefine = redefine
        self.order = order
        self.clock_order = clock_order
        self.rescale_step = rescale_step
        self.codecs = {}
        self.text = TextLineDiffCodec()
        self.index = 0
        self.reset()

    def codec(self, spec):
        '''The codec for a field: numeric differences, or text diffs.'''
        if spec not in self.codecs:
            if spec.kind not in KINDS:
                raise ValueError('Unknown field kind ' + repr(spec.kind))
            if spec.kind == NUMERIC:
                self.codecs[spec] = NumericDifferenceCodec(spec.decimals)
            else:
                self.codecs[spec] = TextLineDiffCodec(spec.width)
        return self.codecs[spec]

    def reset(self):
        '''Invalidate all state; every series starts over.'''
        self.arcs = {}
        self.flags = {}
        self.clock = None
        self.epochline = None

    # Epoch lines

    def encode_descriptor(self, text):
        if self.epochline is None:
            compact = self.reference(text)
        else:
            compact = self.text.encode(text, self.epochline)
        self.epochline = text
        return compact

    def reference(self, text):
        '''The compact form of an epoch line sent without a predecessor.'''
        if text[:1] != (' ' if self.layout.major == 2 else '>'):
            raise RinexFormatError('Malformed epoch line: ' + repr(text))
        if '&' in text:
            raise RinexFormatError('Cannot represent `&\' in ' + repr(text))
        if self.layout.major == 2:
            return '&' + text[1:]
        return text

    def decode_descriptor(self, line):
        '''Rebuild the epoch line from its compact form.'''
        reference = line[:1] == self.layout.marker
        text = self.text.decode(line, self.epochline, reference)
        self.epochline = text
        return self.layout.descriptor(text)

    # Receiver clock offset

    def encode_clock(self, scaled):
        if scaled is None:
            return ''
        if self.clock is None:
            self.clock = DifferenceState(self.clock_order)
        order = self.clock.order if self.clock.empty else None
        codec = self.codec(self.layout.clock)
        return format_token(codec.encode(scaled, self.clock), order)

    def decode_clock(self, line):
        order, symbol = parse_token(line.strip())
        if symbol is None:
            return None
        if order is not None:
            if self.clock is None:
                self.clock = DifferenceState(order)
            self.clock.reset(order)
        elif self.clock is None:
            raise DecodeStateError('Clock offset difference with no prior '
                                   'value', observable='clock')
        try:
            return self.codec(self.layout.clock).decode(
                symbol, self.clock, absolute=order is not None)
        except HatanakaError as err:
            raise err.locate(observable='clock')

    # Observation data

    def encode_satellite(self, prn, slots):
        '''Compact data line for one satellite's FieldSlots.'''
        tokens = []
        for (code, spec), slot in zip(self.layout.table(prn), slots):
            if slot.value is None:
                tokens.append('')
                continue
            arc = self.arcs.get((prn, code))
            if arc is None:
                arc = self.arcs[prn, code] = DifferenceState(self.order)
            order = arc.order if arc.empty else None
            try:
                symbol = self.codec(spec).encode(slot.value, arc)
            except HatanakaError as err:
                raise err.locate(satellite=prn, observable=code)
            tokens.append(format_token(symbol, order))
        flags = ''.join(slot.lli + slot.ssi for slot in slots)
        codec = self.codec(self.layout.flags(prn))
        try:
            flagdiff = codec.encode(flags, self.flags.get(prn, ''))
        except HatanakaError as err:
            raise err.locate(satellite=prn)
        self.flags[prn] = flags
        if flagdiff:
            return ' '.join(tokens + [flagdiff])
        return ' '.join(tokens).rstrip()

    def decode_satellite(self, prn, line):
        '''FieldSlots of one satellite from its compact data line.'''
        table = self.layout.table(prn)
        nobs = len(table)
        parts = line.split(' ', nobs)
        fields = parts[:nobs] + [''] * (nobs - len(parts))
        flagdiff = parts[nobs] if len(parts) > nobs else ''
        values = []
        for (code, spec), token in zip(table, fields):
            try:
                order, symbol = parse_token(token)
                if symbol is None:
                    values.append(None)
                    continue
                arc = self.arcs.get((prn, code))
                if order is not None:
                    if arc is None:
                        arc = self.arcs[prn, code] = DifferenceState(order)
                    arc.reset(order)
                elif arc is None:
                    raise DecodeStateError('Difference with no prior value')
                values.append(self.codec(spec).decode(
                    symbol, arc, absolute=order is not None))
            except HatanakaError as err:
                raise err.locate(satellite=prn, observable=code)
        flagspec = self.layout.flags(prn)
        if len(flagdiff) > flagspec.width:
            raise RinexFormatError('%d flag characters for %d observables: %r'
                                   % (len(flagdiff), nobs, flagdiff),
                                   satellite=prn)
        flags = self.codec(flagspec).decode(flagdiff, self.flags.get(prn, ''))
        self.flags[prn] = flags
        return [FieldSlot(value, flags[2 * j], flags[2 * j + 1])
                for j, value in enumerate(values)]

    # Whole epochs

    def decompress(self, line, lines):
        '''Turn one compact epoch block into plain RINEX lines.

        line is the compact epoch line, the rest of the block is taken from
        the iterator lines.  Nothing is returned unless the whole block
        decoded.
        '''
        self.index += 1
        nextline = pull(lines)
        try:
            descriptor = self.decode_descriptor(line)
            if descriptor.flag > 1:
                return self.passthrough(descriptor, nextline)
            clock = self.decode_clock(nextline())
            descriptor = descriptor._replace(clock=clock)
            out = self.layout.epoch_lines(descriptor, self.rescale_step)
            for prn in descriptor.satellites:
                slots = self.decode_satellite(prn, nextline())
                out.extend(self.layout.slots_lines(prn, slots,
                                                   self.rescale_step))
        except HatanakaError as err:
            raise err.locate(epoch=self.index)
        return out

    def compress(self, line, lines):
        '''Turn one plain RINEX epoch block into compact lines.'''
        self.index += 1
        nextline = pull(lines)
        line = line.rstrip()
        try:
            if self.layout.flag(line) > 1:
                return self.passthrough(self.layout.descriptor(line), nextline,
                                        self.reference(line))
            text, clock, records = self.layout.read_epoch(line, nextline)
            out = [self.encode_descriptor(text), self.encode_clock(clock)]
            for prn, slots in records:
                out.append(self.encode_satellite(prn, slots))
        except HatanakaError as err:
            raise err.locate(epoch=self.index)
        return out

    def passthrough(self, descriptor, nextline, first=None):
        '''Copy a special event block, then reset all state.'''
        if descriptor.flag == 6:
            raise UnsupportedEventError('Cycle slip records (epoch flag 6) '
                                        'are not supported')
        block = [nextline() for k in range(descriptor.count)]
        log.debug('Epoch %d: event flag %d, %d special records; resetting',
                  self.index, descriptor.flag, descriptor.count)
        self.reset()
        if self.redefine is not None:
            layout = self.redefine(block)
            if layout is not None:
                self.layout = layout
        if first is None:
            first = descriptor.text.rstrip()
        return [first] + block
